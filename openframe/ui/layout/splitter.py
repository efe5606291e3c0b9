"""
Splitter handle widget.

A thin bar between two adjacent panes. Pressing it starts a drag on the
editor's DragController with the handle as the pointer capture, so the
handle keeps receiving moves and the release even when the pointer
leaves it. Unmounting mid-drag cancels the drag.
"""

import logging
from typing import TYPE_CHECKING

from textual import events
from textual.message import Message
from textual.widget import Widget

from ...layout.tree import Axis

if TYPE_CHECKING:
    from .canvas import SectionView

logger = logging.getLogger(__name__)


class SplitterHandle(Widget):
    """Draggable boundary after child ``child_index`` of a section."""

    DEFAULT_CSS = """
    SplitterHandle {
        background: $panel-lighten-1;
    }
    SplitterHandle.-row {
        width: 1;
        height: 1fr;
    }
    SplitterHandle.-column {
        height: 1;
        width: 1fr;
    }
    SplitterHandle:hover, SplitterHandle.-dragging {
        background: $accent;
    }
    """

    class Resized(Message):
        """Posted when a drag on this handle ends."""

        def __init__(self, section_id: str, child_index: int) -> None:
            self.section_id = section_id
            self.child_index = child_index
            super().__init__()

    def __init__(self, section_view: "SectionView", child_index: int) -> None:
        super().__init__()
        self.section_view = section_view
        self.child_index = child_index
        self.axis = section_view.section.axis
        self.add_class("-row" if self.axis is Axis.ROW else "-column")

    @property
    def section_id(self) -> str:
        return self.section_view.section.id

    @property
    def is_dragging(self) -> bool:
        return self.has_class("-dragging")

    def _coord(self, event: events.MouseEvent) -> float:
        return event.screen_x if self.axis is Axis.ROW else event.screen_y

    # PointerCapture

    def capture(self) -> None:
        self.capture_mouse()
        self.add_class("-dragging")

    def release(self) -> None:
        self.release_mouse()
        self.remove_class("-dragging")

    # Mouse handling

    def on_mouse_down(self, event: events.MouseDown) -> None:
        event.stop()
        editor = self.section_view.editor
        editor.on_drag_start(
            self.section_id,
            self.child_index,
            self._coord(event),
            self.section_view.axis_length(),
            axis=self.axis,
            capture=self,
        )

    def on_mouse_move(self, event: events.MouseMove) -> None:
        if not self.is_dragging:
            return
        event.stop()
        self.section_view.editor.on_drag_move(
            self._coord(event), self.section_view.axis_length()
        )

    def on_mouse_up(self, event: events.MouseUp) -> None:
        if not self.is_dragging:
            return
        event.stop()
        self.section_view.editor.on_drag_end()
        self.post_message(self.Resized(self.section_id, self.child_index))

    def on_unmount(self) -> None:
        if self.is_dragging:
            logger.debug(f"Splitter on '{self.section_id}' unmounted mid-drag")
            self.section_view.editor.drag.cancel()
