"""
Textual rendering of a layout tree.

``LayoutCanvas`` turns the editor's tree into nested Horizontal/Vertical
containers. Each child is a pane sized with ``fr`` units equal to its
flex, and a ``SplitterHandle`` sits between adjacent panes. Widget slots
are resolved through the editor's widget registry; dangling references
render as empty panes.

When only flex values change (a drag) panes are restyled in place, so
the handle holding the mouse capture survives. Any structural change
recomposes the canvas.
"""

import logging
from typing import Dict, Hashable, List, Optional, Tuple

from textual import events
from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widget import Widget
from textual.widgets import Static

from ...config.constants import SPLITTER_THICKNESS
from ...layout.session import LayoutEditor
from ...layout.tree import Axis, Child, Section, iter_sections
from .splitter import SplitterHandle

logger = logging.getLogger(__name__)


def _fr(flex: float) -> str:
    return f"{round(flex, 4)}fr"


def structure_signature(tree: Section) -> Tuple[Hashable, ...]:
    """Everything about a tree except flex values."""
    signature: List[Hashable] = []
    for section in iter_sections(tree):
        signature.append(
            (
                section.id,
                section.axis,
                tuple(
                    (c.id, type(c.content).__name__, c.widget_id) for c in section.children
                ),
            )
        )
    return tuple(signature)


class SlotView(Static):
    """A leaf pane: a widget placeholder or an empty slot."""

    DEFAULT_CSS = """
    SlotView {
        width: 1fr;
        height: 1fr;
        border: round $panel-lighten-2;
        content-align: center middle;
        color: $text-muted;
    }
    SlotView.-widget {
        color: $text;
    }
    SlotView.-selected {
        border: double $accent;
    }
    """

    class Selected(Message):
        def __init__(self, slot_id: str) -> None:
            self.slot_id = slot_id
            super().__init__()

    def __init__(self, child: Child, label: Optional[str], selected: bool = False) -> None:
        super().__init__(self._label_markup(child, label))
        self.slot_id = child.id
        self.set_class(label is not None, "-widget")
        self.set_class(selected, "-selected")

    @staticmethod
    def _label_markup(child: Child, label: Optional[str]) -> str:
        if label is None:
            return "[dim]Empty[/dim]"
        return f"[b]{label}[/b]\n[dim]{child.widget_id}[/dim]"

    def on_click(self, event: events.Click) -> None:
        event.stop()
        self.post_message(self.Selected(self.slot_id))


class SectionView(Widget):
    """One section: its panes along the section axis, with handles between."""

    DEFAULT_CSS = """
    SectionView {
        width: 1fr;
        height: 1fr;
    }
    SectionView > Horizontal, SectionView > Vertical {
        width: 1fr;
        height: 1fr;
    }
    """

    def __init__(self, section: Section, editor: LayoutEditor, canvas: "LayoutCanvas") -> None:
        super().__init__()
        self.section = section
        self.editor = editor
        self.layout_canvas = canvas
        self._panes: Dict[str, Widget] = {}
        canvas.register_section_view(self)

    def compose(self) -> ComposeResult:
        container = Horizontal() if self.section.axis is Axis.ROW else Vertical()
        with container:
            last = len(self.section.children) - 1
            for index, child in enumerate(self.section.children):
                pane = self._build_pane(child)
                self._panes[child.id] = pane
                self._apply_size(pane, child.flex)
                yield pane
                if index < last:
                    yield SplitterHandle(self, index)

    def _build_pane(self, child: Child) -> Widget:
        if child.is_nested:
            return SectionView(child.section, self.editor, self.layout_canvas)
        label = self.editor.widgets.display_name(child.widget_id)
        return SlotView(child, label, selected=child.id == self.layout_canvas.selected_slot_id)

    def _apply_size(self, pane: Widget, flex: float) -> None:
        if self.section.axis is Axis.ROW:
            pane.styles.width = _fr(flex)
            pane.styles.height = "1fr"
        else:
            pane.styles.height = _fr(flex)
            pane.styles.width = "1fr"

    def axis_length(self) -> float:
        """Section length along its axis, excluding splitter handles."""
        length = self.size.width if self.section.axis is Axis.ROW else self.size.height
        handles = (len(self.section.children) - 1) * SPLITTER_THICKNESS
        return max(length - handles, 1)

    def apply_flex(self, section: Section) -> None:
        """Restyle panes from an updated copy of this section."""
        self.section = section
        for child in section.children:
            pane = self._panes.get(child.id)
            if pane is not None:
                self._apply_size(pane, child.flex)


class LayoutCanvas(Widget):
    """Renders the editor's tree and keeps it in sync with changes."""

    DEFAULT_CSS = """
    LayoutCanvas {
        width: 1fr;
        height: 1fr;
    }
    """

    class Changed(Message):
        """Posted after the canvas picked up a new tree."""

        def __init__(self, structural: bool) -> None:
            self.structural = structural
            super().__init__()

    def __init__(self, editor: LayoutEditor, **kwargs) -> None:
        super().__init__(**kwargs)
        self.editor = editor
        self._section_views: Dict[str, SectionView] = {}
        self._signature = structure_signature(editor.tree)
        editor.add_listener(self._on_tree_changed)

    def register_section_view(self, view: SectionView) -> None:
        self._section_views[view.section.id] = view

    def section_view(self, section_id: str) -> Optional[SectionView]:
        return self._section_views.get(section_id)

    @property
    def selected_slot_id(self) -> Optional[str]:
        info = self.editor.selected_slot_info()
        return info.slot_id if info else None

    def compose(self) -> ComposeResult:
        self._section_views.clear()
        yield SectionView(self.editor.tree, self.editor, self)

    def on_unmount(self) -> None:
        self.editor.remove_listener(self._on_tree_changed)

    def _on_tree_changed(self, tree: Section) -> None:
        signature = structure_signature(tree)
        structural = signature != self._signature
        self._signature = signature

        if structural:
            self.refresh(recompose=True)
        else:
            for section in iter_sections(tree):
                view = self._section_views.get(section.id)
                if view is not None:
                    view.apply_flex(section)
        self.post_message(self.Changed(structural))

    def refresh_selection(self) -> None:
        selected = self.selected_slot_id
        for slot in self.query(SlotView):
            slot.set_class(slot.slot_id == selected, "-selected")
