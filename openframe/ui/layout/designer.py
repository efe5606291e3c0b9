"""
Layout designer TUI.

Edits one profile's layout: select a pane, split it, remove it, insert
rows, distribute weights, assign widgets, and drag splitter handles.
Key bindings are hidden whenever the action is not available for the
selected pane.
"""

import logging
from typing import Any, Dict, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header, Static

from ...layout.intents import Affordance, affordances_for
from ...layout.session import LayoutEditor
from ...layout.store import LayoutDocument, LayoutStore
from ...layout.tree import Axis, find_child, iter_children
from ...utils.error_handling import StoreError
from .canvas import LayoutCanvas, SlotView
from .splitter import SplitterHandle

logger = logging.getLogger(__name__)

# Binding action -> affordance that must be available for it to show
_ACTION_AFFORDANCES: Dict[str, Affordance] = {
    "split_row": Affordance.SPLIT_ROW,
    "split_column": Affordance.SPLIT_COLUMN,
    "remove": Affordance.REMOVE,
    "add_row_above": Affordance.ADD_ROW_ABOVE,
    "add_row_below": Affordance.ADD_ROW_BELOW,
    "distribute": Affordance.DISTRIBUTE,
    "assign_widget": Affordance.ASSIGN_WIDGET,
}


class LayoutDesignerApp(App[None]):
    """Interactive editor for a profile's split-pane layout."""

    TITLE = "openframe designer"

    CSS = """
    #designer-status {
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    """

    BINDINGS = [
        Binding("n", "select_next", "Next pane"),
        Binding("p", "select_previous", "Prev pane"),
        Binding("c", "split_row", "Split columns"),
        Binding("r", "split_column", "Split rows"),
        Binding("x", "remove", "Remove"),
        Binding("a", "add_row_above", "Row above"),
        Binding("b", "add_row_below", "Row below"),
        Binding("e", "distribute", "Distribute"),
        Binding("w", "assign_widget", "Widget"),
        Binding("s", "save", "Save"),
        Binding("ctrl+r", "reset", "Reset"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        profile: str,
        store: Optional[LayoutStore] = None,
        document: Optional[LayoutDocument] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.profile = profile
        self.store = store or LayoutStore()
        document = document or self.store.load(profile)
        self.editor = LayoutEditor(document.tree, document.widgets)
        self.modified = document.recovered
        self._recovered = document.recovered

    def compose(self) -> ComposeResult:
        yield Header()
        yield LayoutCanvas(self.editor, id="designer-canvas")
        yield Static("", id="designer-status")
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = self.profile
        self.editor.cycle_selection()
        self._selection_changed()
        if self._recovered:
            self.notify("Stored layout was unreadable; started from the default", severity="warning")

    # =========================================================================
    # Helpers
    # =========================================================================

    @property
    def layout_canvas(self) -> LayoutCanvas:
        return self.query_one(LayoutCanvas)

    def _selection_changed(self) -> None:
        self.layout_canvas.refresh_selection()
        self.refresh_bindings()
        self._update_status()

    def _update_status(self, message: Optional[str] = None) -> None:
        info = self.editor.selected_slot_info()
        parts = [f"profile: {self.profile}"]
        if info:
            parts.append(f"pane: {info.slot_id} ({info.sibling_count} in {info.parent_section_id})")
        if self.modified:
            parts.append("modified")
        if message:
            parts.append(message)
        self.query_one("#designer-status", Static).update(" | ".join(parts))

    def _after_operation(self) -> None:
        result = self.editor.last_result
        if result is not None and not result.ok:
            self._update_status(f"not applied: {result.message}")
        else:
            self.modified = True
            self._update_status()
        self.layout_canvas.refresh_selection()
        self.refresh_bindings()

    def check_action(self, action: str, parameters: tuple) -> Optional[bool]:
        affordance = _ACTION_AFFORDANCES.get(action)
        if affordance is None:
            return True
        info = self.editor.selected_slot_info()
        if info is None:
            return False
        return affordance in affordances_for(self.editor.tree, info.slot_id)

    # =========================================================================
    # Messages
    # =========================================================================

    def on_slot_view_selected(self, message: SlotView.Selected) -> None:
        self.editor.select_slot(message.slot_id)
        self._selection_changed()

    def on_splitter_handle_resized(self, message: SplitterHandle.Resized) -> None:
        self.modified = True
        self._update_status()

    def on_layout_canvas_changed(self, message: LayoutCanvas.Changed) -> None:
        if message.structural:
            self.refresh_bindings()

    # =========================================================================
    # Actions
    # =========================================================================

    def action_select_next(self) -> None:
        self.editor.cycle_selection(1)
        self._selection_changed()

    def action_select_previous(self) -> None:
        self.editor.cycle_selection(-1)
        self._selection_changed()

    def _split(self, axis: Axis) -> None:
        info = self.editor.selected_slot_info()
        if info:
            self.editor.on_split(info.parent_section_id, info.slot_id, axis)
            self._after_operation()

    def action_split_row(self) -> None:
        self._split(Axis.ROW)

    def action_split_column(self) -> None:
        self._split(Axis.COLUMN)

    def action_remove(self) -> None:
        info = self.editor.selected_slot_info()
        if info:
            self.editor.on_remove(info.parent_section_id, info.slot_id)
            if self.editor.last_result.ok:
                self.editor.cycle_selection()
            self._after_operation()

    def action_add_row_above(self) -> None:
        info = self.editor.selected_slot_info()
        if info:
            self.editor.on_add_row_above(info.parent_section_id, info.slot_id)
            self._after_operation()

    def action_add_row_below(self) -> None:
        info = self.editor.selected_slot_info()
        if info:
            self.editor.on_add_row_below(info.parent_section_id, info.slot_id)
            self._after_operation()

    def action_distribute(self) -> None:
        info = self.editor.selected_slot_info()
        if info:
            self.editor.on_distribute(info.parent_section_id)
            self._after_operation()

    def action_assign_widget(self) -> None:
        """Put a new widget in the selected pane, cycling through widget types."""
        info = self.editor.selected_slot_info()
        if info is None:
            return

        types = self.editor.widgets.catalog.list_types()
        parent, index = find_child(self.editor.tree, info.slot_id)
        instance = self.editor.widgets.lookup(parent.children[index].widget_id)
        current = instance.widget_type if instance else None

        next_type = types[(types.index(current) + 1) % len(types)] if current in types else types[0]
        self.editor.on_create_widget(info.slot_id, next_type)
        if self.editor.last_result.ok and instance is not None:
            still_used = any(
                child.widget_id == instance.id for _, _, child in iter_children(self.editor.tree)
            )
            if not still_used:
                self.editor.widgets.remove(instance.id)
        self._after_operation()

    def action_save(self) -> None:
        document = LayoutDocument(self.profile, self.editor.tree, self.editor.widgets)
        try:
            path = self.store.save(document)
        except StoreError as e:
            logger.error(f"Save failed: {e.message}: {e.details}")
            self.notify(f"Save failed: {e.message}", severity="error")
            return
        self.modified = False
        self._update_status(f"saved to {path.name}")

    def action_reset(self) -> None:
        self.editor.reset()
        self.modified = True
        self.editor.cycle_selection()
        self._selection_changed()


def run_designer(profile: str, store: Optional[LayoutStore] = None) -> None:
    """Launch the designer for ``profile``."""
    from ...utils.logging_utils import setup_tui_logging

    setup_tui_logging(__name__)
    LayoutDesignerApp(profile, store=store).run()
