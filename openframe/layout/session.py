"""
Layout editing session.

``LayoutEditor`` is the one owner of an in-memory layout while it is
being edited. It exposes the callbacks a renderer wires to its
affordances and splitter handles; each callback runs synchronously and
returns the new tree. It also tracks the selection cursor (a selected
widget or slot) and notifies listeners whenever the tree changes.
"""

import logging
from typing import Callable, List, NamedTuple, Optional

from .drag import DragController, PointerCapture
from .engine import OperationResult
from .intents import (
    AddRowIntent,
    AssignIntent,
    DistributeIntent,
    LayoutIntent,
    RemoveIntent,
    RowPosition,
    SplitIntent,
    apply_intent,
)
from .tree import Axis, Section, default_tree, find_child, iter_children
from .widgets import WidgetRegistry

logger = logging.getLogger(__name__)

TreeListener = Callable[[Section], None]


class SlotInfo(NamedTuple):
    """Where the selected slot sits in the tree."""

    parent_section_id: str
    slot_id: str
    sibling_count: int


class LayoutEditor:
    """Editing session over a single layout tree.

    Usage:
        editor = LayoutEditor(tree, widgets)
        editor.add_listener(renderer.refresh_tree)
        tree = editor.on_split("root", child_id, Axis.COLUMN)
    """

    def __init__(
        self,
        tree: Optional[Section] = None,
        widgets: Optional[WidgetRegistry] = None,
        drag: Optional[DragController] = None,
    ) -> None:
        self._tree = tree or default_tree()
        self.widgets = widgets if widgets is not None else WidgetRegistry()
        self.drag = drag or DragController()
        self.selected_widget_id: Optional[str] = None
        self.selected_slot_id: Optional[str] = None
        self.last_result: Optional[OperationResult] = None
        self._listeners: List[TreeListener] = []

    @property
    def tree(self) -> Section:
        return self._tree

    def add_listener(self, listener: TreeListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: TreeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_tree(self, tree: Section) -> Section:
        if tree is not self._tree:
            self._tree = tree
            for listener in list(self._listeners):
                listener(tree)
        return tree

    def _run(self, intent: LayoutIntent) -> Section:
        result = apply_intent(self._tree, intent)
        self.last_result = result
        if not result.ok:
            logger.info(f"{type(intent).__name__} rejected: {result.message}")
        return self._set_tree(result.tree)

    # =========================================================================
    # Renderer callbacks
    # =========================================================================

    def dispatch(self, intent: LayoutIntent) -> Section:
        """Apply an intent produced by input handling."""
        return self._run(intent)

    def on_split(self, section_id: str, child_id: str, axis: Axis) -> Section:
        tree = self._run(SplitIntent(section_id, child_id, axis))
        if self.last_result.ok and self.selected_slot_id == child_id:
            # The selected slot became a wrapper; follow its content
            self.selected_slot_id = self.last_result.new_ids[1]
        return tree

    def on_remove(self, section_id: str, child_id: str) -> Section:
        tree = self._run(RemoveIntent(section_id, child_id))
        if self.last_result.ok and self.selected_slot_id == child_id:
            self.selected_slot_id = None
        return tree

    def on_assign(self, slot_id: str, widget_id: str) -> Section:
        return self._run(AssignIntent(slot_id, widget_id))

    def on_create_widget(self, slot_id: str, widget_type: str) -> Section:
        """Create a widget instance of ``widget_type`` and assign it to a slot.

        The instance is only kept if the assignment succeeds, so a bad
        slot id never leaves an orphan widget behind.

        Raises:
            WidgetTypeError: If the widget type is unknown
        """
        instance = self.widgets.create(widget_type)
        tree = self._run(AssignIntent(slot_id, instance.id))
        if self.last_result.ok:
            self.select_widget(instance.id)
        else:
            self.widgets.remove(instance.id)
        return tree

    def on_add_row_above(self, section_id: str, child_id: str) -> Section:
        return self._run(AddRowIntent(section_id, child_id, RowPosition.ABOVE))

    def on_add_row_below(self, section_id: str, child_id: str) -> Section:
        return self._run(AddRowIntent(section_id, child_id, RowPosition.BELOW))

    def on_distribute(self, section_id: str) -> Section:
        return self._run(DistributeIntent(section_id))

    def on_drag_start(
        self,
        section_id: str,
        child_index: int,
        coord: float,
        container_size_px: float,
        axis: Optional[Axis] = None,
        capture: Optional[PointerCapture] = None,
    ) -> Section:
        return self.drag.pointer_down(
            self._tree, section_id, child_index, coord, container_size_px, axis, capture
        )

    def on_drag_move(self, coord: float, container_size_px: Optional[float] = None) -> Section:
        return self._set_tree(self.drag.pointer_move(self._tree, coord, container_size_px))

    def on_drag_end(self) -> Section:
        return self.drag.pointer_up(self._tree)

    def replace_tree(self, tree: Section) -> Section:
        """Swap in a different layout wholesale (profile switch, template)."""
        self.drag.cancel()
        self.clear_selection()
        return self._set_tree(tree)

    def reset(self) -> Section:
        """Discard the layout and start over with the default tree."""
        return self.replace_tree(default_tree())

    # =========================================================================
    # Selection
    # =========================================================================

    def select_slot(self, slot_id: Optional[str]) -> None:
        self.selected_widget_id = None
        self.selected_slot_id = slot_id

    def select_widget(self, widget_id: Optional[str]) -> None:
        self.selected_slot_id = None
        self.selected_widget_id = widget_id

    def clear_selection(self) -> None:
        self.selected_slot_id = None
        self.selected_widget_id = None

    def selected_slot_info(self) -> Optional[SlotInfo]:
        """Locate the selection, by widget id for filled slots or by slot id."""
        if not self.selected_widget_id and not self.selected_slot_id:
            return None

        for parent, _, child in iter_children(self._tree):
            if self.selected_widget_id and child.widget_id == self.selected_widget_id:
                return SlotInfo(parent.id, child.id, len(parent.children))
            if self.selected_slot_id and child.id == self.selected_slot_id:
                return SlotInfo(parent.id, child.id, len(parent.children))
        return None

    def slot_ids(self) -> List[str]:
        """Ids of every non-nested slot in reading order."""
        return [child.id for _, _, child in iter_children(self._tree) if not child.is_nested]

    def cycle_selection(self, step: int = 1) -> Optional[str]:
        """Move the slot cursor forward or backward through the slots."""
        slots = self.slot_ids()
        if not slots:
            return None

        info = self.selected_slot_info()
        if info is None or info.slot_id not in slots:
            index = 0 if step > 0 else len(slots) - 1
        else:
            index = (slots.index(info.slot_id) + step) % len(slots)

        self.select_slot(slots[index])
        return slots[index]

    def has_slot(self, slot_id: str) -> bool:
        return find_child(self._tree, slot_id) is not None
