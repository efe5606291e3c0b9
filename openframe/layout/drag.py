"""
Drag controller for splitter handles.

Turns a pointer-down / move* / up sequence on the boundary between two
adjacent children into repeated ``resize_siblings`` calls. The active
drag is an explicit ``DragSession`` value that exists only between
pointer-down and pointer-up (or cancel); there is no global drag state.

While a session is live the controller holds a pointer capture, so that
moves and the release are delivered even when the pointer leaves the
handle. The capture is released on every exit path.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Protocol

from ..config.constants import MIN_FLEX
from .engine import OperationResult, resize_siblings
from .tree import Axis, Section

logger = logging.getLogger(__name__)


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


class PointerCapture(Protocol):
    """Routes all pointer events to the drag owner while held."""

    def capture(self) -> None:
        ...

    def release(self) -> None:
        ...


@dataclass(frozen=True)
class DragSession:
    """State of one drag, from pointer-down to pointer-up.

    Attributes:
        section_id: Section whose boundary is being dragged
        child_index: Index of the child before the boundary
        axis: Section axis; coordinates are measured along it
        container_size_px: Section length along its axis
        start_coord: Pointer coordinate at pointer-down
        last_coord: Pointer coordinate at the previous move
    """

    section_id: str
    child_index: int
    axis: Axis
    container_size_px: float
    start_coord: float
    last_coord: float

    @property
    def total_delta(self) -> float:
        return self.last_coord - self.start_coord


class DragController:
    """Per-boundary state machine: IDLE -> DRAGGING -> ... -> IDLE.

    Usage:
        controller = DragController(capture=handle_capture)
        tree = controller.pointer_down(tree, "root", 0, coord=120, container_size_px=400)
        tree = controller.pointer_move(tree, coord=140)
        tree = controller.pointer_up(tree)
    """

    def __init__(
        self,
        capture: Optional[PointerCapture] = None,
        min_flex: float = MIN_FLEX,
    ) -> None:
        self._capture = capture
        self.min_flex = min_flex
        self._session: Optional[DragSession] = None
        self._captured: Optional[PointerCapture] = None
        self.last_result: Optional[OperationResult] = None

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def state(self) -> DragState:
        return DragState.DRAGGING if self._session else DragState.IDLE

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    def pointer_down(
        self,
        tree: Section,
        section_id: str,
        child_index: int,
        coord: float,
        container_size_px: float,
        axis: Optional[Axis] = None,
        capture: Optional[PointerCapture] = None,
    ) -> Section:
        """Start dragging the boundary after ``child_index`` in ``section_id``.

        A pointer-down while a drag is active ends that drag first.

        Args:
            tree: Current layout
            section_id: Section containing the boundary
            child_index: Index of the child before the boundary
            coord: Pointer coordinate along the section's axis
            container_size_px: Section length along its axis
            axis: Section axis (recorded for the renderer's benefit)
            capture: Capture for this drag, overriding the controller default

        Returns:
            The tree, unchanged
        """
        if self._session is not None:
            self._end("superseded")

        self._session = DragSession(
            section_id=section_id,
            child_index=child_index,
            axis=axis or Axis.ROW,
            container_size_px=container_size_px,
            start_coord=coord,
            last_coord=coord,
        )

        target = capture or self._capture
        if target is not None:
            target.capture()
            self._captured = target

        logger.debug(f"Drag started on '{section_id}'[{child_index}] at {coord}")
        return tree

    def pointer_move(
        self, tree: Section, coord: float, container_size_px: Optional[float] = None
    ) -> Section:
        """Apply the movement since the last event as one resize tick.

        Rejected ticks (a pane would cross the minimum) leave the tree as
        it was. The last coordinate advances either way.
        """
        session = self._session
        if session is None:
            return tree

        size = container_size_px if container_size_px is not None else session.container_size_px
        delta = coord - session.last_coord
        self._session = replace(session, last_coord=coord, container_size_px=size)

        if delta == 0:
            return tree

        result = resize_siblings(
            tree, session.section_id, session.child_index, delta, size, self.min_flex
        )
        self.last_result = result
        return result.tree

    def pointer_up(self, tree: Section) -> Section:
        """Finish the drag wherever the pointer was released."""
        if self._session is not None:
            self._end("released")
        return tree

    def cancel(self) -> None:
        """Abort a drag without touching the tree (e.g. handle unmounted)."""
        if self._session is not None:
            self._end("cancelled")

    def _end(self, reason: str) -> None:
        session = self._session
        self._session = None
        if self._captured is not None:
            captured, self._captured = self._captured, None
            captured.release()
        if session is not None:
            logger.debug(
                f"Drag {reason} on '{session.section_id}'[{session.child_index}] "
                f"after {session.total_delta:+.1f}"
            )
