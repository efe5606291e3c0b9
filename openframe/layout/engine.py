"""
Splitter engine: pure mutations of a layout tree.

Every operation takes a tree plus ids/parameters and returns an
``OperationResult``. A failed operation hands back the unchanged input
tree with an ``OperationError`` describing why; nothing here raises for
"not found" or guard cases, so the tree is always renderable.

Operations:
    split              - nest a child into a two-pane section
    remove_slot        - drop a child, collapsing a lone nested sibling
    assign_widget      - bind a slot to a widget instance id
    add_row_above/below - insert an empty sibling next to a child
    distribute_evenly  - reset one section's weights
    set_section_children - replace one section's children
    resize_siblings    - move the boundary between two adjacent children
"""

import logging
import math
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Tuple

from ..config.constants import DISTRIBUTE_FLEX, MIN_FLEX
from .tree import (
    EMPTY,
    Axis,
    Child,
    NestedContent,
    Section,
    WidgetContent,
    find_child,
    find_section,
    generate_id,
    iter_children,
    iter_sections,
    replace_section,
)

logger = logging.getLogger(__name__)


class OperationError(Enum):
    """Why an operation left the tree unchanged."""

    SECTION_NOT_FOUND = "section not found"
    CHILD_NOT_FOUND = "child not found in section"
    SLOT_NOT_FOUND = "slot not found"
    NOT_A_SLOT = "target holds a nested section, not a slot"
    LONE_CHILD = "a section must keep at least one child"
    EMPTY_CHILDREN = "replacement children list is empty"
    INDEX_OUT_OF_RANGE = "no adjacent pair at that index"
    INVALID_CONTAINER = "container size must be positive"
    INVALID_DELTA = "pointer delta must be a finite number"
    INVALID_FLEX = "flex must be a finite number"
    BELOW_MIN_FLEX = "result would shrink a pane below the minimum flex"
    DUPLICATE_ID = "id is already used in the layout"


class OperationResult(NamedTuple):
    """Outcome of an engine operation.

    Attributes:
        tree: The new tree, or the unchanged input on failure
        ok: Whether the operation was applied
        error: Reason for failure, None on success
        new_ids: Ids of nodes the operation created, in creation order
    """

    tree: Section
    ok: bool
    error: Optional[OperationError] = None
    new_ids: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        return self.error.value if self.error else "ok"


def _applied(tree: Section, *new_ids: str) -> OperationResult:
    return OperationResult(tree, True, None, tuple(new_ids))


def _rejected(tree: Section, error: OperationError) -> OperationResult:
    return OperationResult(tree, False, error)


def _locate(
    tree: Section, section_id: str, child_id: str
) -> Tuple[Optional[Section], Optional[int], Optional[OperationError]]:
    section = find_section(tree, section_id)
    if section is None:
        return None, None, OperationError.SECTION_NOT_FOUND
    index = section.index_of(child_id)
    if index is None:
        return section, None, OperationError.CHILD_NOT_FOUND
    return section, index, None


# =============================================================================
# Structural operations
# =============================================================================


def split(
    tree: Section,
    section_id: str,
    child_id: str,
    axis: Axis,
    min_flex: float = MIN_FLEX,
) -> OperationResult:
    """Split a child into a nested section of two panes along ``axis``.

    The child keeps its id and flex and becomes the wrapper; inside it the
    original content moves to the first pane and the second pane is
    empty. Both panes get half the original flex. Splitting along the
    parent's own axis still nests.

    Args:
        tree: Root of the layout
        section_id: Id of the section that directly contains the child
        child_id: Id of the child to split
        axis: Axis of the new nested section
        min_flex: Floor the halves must respect

    Returns:
        OperationResult whose new_ids are (section, first pane, second pane)
    """
    section, index, error = _locate(tree, section_id, child_id)
    if error:
        return _rejected(tree, error)

    target = section.children[index]
    half = target.flex / 2
    if half < min_flex:
        return _rejected(tree, OperationError.BELOW_MIN_FLEX)

    nested_id = generate_id("section")
    first_id = generate_id()
    second_id = generate_id()
    nested = Section(
        id=nested_id,
        axis=Axis.from_value(axis),
        children=(
            Child(id=first_id, flex=half, content=target.content),
            Child(id=second_id, flex=half, content=EMPTY),
        ),
    )

    def _update(parent: Section) -> Section:
        children = list(parent.children)
        children[index] = target.with_content(NestedContent(nested))
        return parent.with_children(children)

    new_tree = replace_section(tree, section_id, _update)
    return _applied(new_tree, nested_id, first_id, second_id)


def remove_slot(tree: Section, parent_section_id: str, child_id: str) -> OperationResult:
    """Remove a child from its section.

    Refused when the child is the section's only one. If a single
    sibling remains and it is a nested section, that section's children
    are lifted into the parent and the parent takes the nested axis, so
    the panes keep their on-screen arrangement. Flex values are not
    renormalized.
    """
    section, index, error = _locate(tree, parent_section_id, child_id)
    if error:
        return _rejected(tree, error)
    if len(section.children) == 1:
        return _rejected(tree, OperationError.LONE_CHILD)

    def _update(parent: Section) -> Section:
        remaining = [c for c in parent.children if c.id != child_id]
        if len(remaining) == 1 and remaining[0].is_nested:
            lifted = remaining[0].section
            return Section(id=parent.id, axis=lifted.axis, children=lifted.children)
        return parent.with_children(remaining)

    return _applied(replace_section(tree, parent_section_id, _update))


def assign_widget(tree: Section, slot_id: str, widget_id: str) -> OperationResult:
    """Bind a widget or empty slot to ``widget_id``, replacing any previous binding."""
    located = find_child(tree, slot_id)
    if located is None:
        return _rejected(tree, OperationError.SLOT_NOT_FOUND)

    parent, index = located
    target = parent.children[index]
    if target.is_nested:
        return _rejected(tree, OperationError.NOT_A_SLOT)

    def _update(section: Section) -> Section:
        children = list(section.children)
        children[index] = target.with_content(WidgetContent(widget_id))
        return section.with_children(children)

    return _applied(replace_section(tree, parent.id, _update))


def _add_row(tree: Section, parent_section_id: str, child_id: str, after: bool) -> OperationResult:
    section, index, error = _locate(tree, parent_section_id, child_id)
    if error:
        return _rejected(tree, error)

    target = section.children[index]
    # New sibling copies the target's current weight rather than halving it
    new_child = Child(id=generate_id(), flex=target.flex, content=EMPTY)
    insert_at = index + 1 if after else index

    def _update(parent: Section) -> Section:
        children = list(parent.children)
        children.insert(insert_at, new_child)
        return parent.with_children(children)

    return _applied(replace_section(tree, parent_section_id, _update), new_child.id)


def add_row_above(tree: Section, parent_section_id: str, child_id: str) -> OperationResult:
    """Insert an empty sibling immediately before the child, in the same section."""
    return _add_row(tree, parent_section_id, child_id, after=False)


def add_row_below(tree: Section, parent_section_id: str, child_id: str) -> OperationResult:
    """Insert an empty sibling immediately after the child, in the same section."""
    return _add_row(tree, parent_section_id, child_id, after=True)


def _flex_error(flex: float, min_flex: float) -> Optional[OperationError]:
    if not math.isfinite(flex):
        return OperationError.INVALID_FLEX
    if flex < min_flex:
        return OperationError.BELOW_MIN_FLEX
    return None


def _node_ids(tree: Section) -> List[str]:
    ids = [section.id for section in iter_sections(tree)]
    ids.extend(child.id for _, _, child in iter_children(tree))
    return ids


def distribute_evenly(
    tree: Section,
    section_id: str,
    flex: float = DISTRIBUTE_FLEX,
    min_flex: float = MIN_FLEX,
) -> OperationResult:
    """Give every immediate child of a section the same weight.

    Nested sections keep their internal ratios. A weight below
    ``min_flex`` is refused.
    """
    error = _flex_error(flex, min_flex)
    if error:
        return _rejected(tree, error)
    if find_section(tree, section_id) is None:
        return _rejected(tree, OperationError.SECTION_NOT_FOUND)

    def _update(section: Section) -> Section:
        return section.with_children(child.with_flex(flex) for child in section.children)

    return _applied(replace_section(tree, section_id, _update))


def set_section_children(
    tree: Section,
    section_id: str,
    children: Iterable[Child],
    min_flex: float = MIN_FLEX,
) -> OperationResult:
    """Replace one section's children wholesale.

    Every new child must respect ``min_flex``, and the resulting tree
    must not repeat an id.
    """
    children = tuple(children)
    if not children:
        return _rejected(tree, OperationError.EMPTY_CHILDREN)
    if find_section(tree, section_id) is None:
        return _rejected(tree, OperationError.SECTION_NOT_FOUND)
    for child in children:
        error = _flex_error(child.flex, min_flex)
        if error:
            return _rejected(tree, error)

    new_tree = replace_section(tree, section_id, lambda s: s.with_children(children))
    ids = _node_ids(new_tree)
    if len(ids) != len(set(ids)):
        return _rejected(tree, OperationError.DUPLICATE_ID)
    return _applied(new_tree)


# =============================================================================
# Interactive resize
# =============================================================================


def resize_siblings(
    tree: Section,
    section_id: str,
    child_index: int,
    pixel_delta: float,
    container_size_px: float,
    min_flex: float = MIN_FLEX,
) -> OperationResult:
    """Move the boundary between children ``child_index`` and ``child_index + 1``.

    The pixel delta is converted to flex units using the section's total
    flex and its on-screen length. Growth of one pane is taken from its
    neighbour, so the pair's sum is unchanged. If either pane would drop
    below ``min_flex`` the whole tick is rejected; there is no partial
    clamp.

    Args:
        tree: Root of the layout
        section_id: Section containing the pair
        child_index: Index of the first child of the pair
        pixel_delta: Pointer movement along the section's axis
        container_size_px: Section length along its axis
        min_flex: Floor for both panes

    Returns:
        OperationResult; BELOW_MIN_FLEX when the tick was ignored
    """
    section = find_section(tree, section_id)
    if section is None:
        return _rejected(tree, OperationError.SECTION_NOT_FOUND)
    if child_index < 0 or child_index + 1 >= len(section.children):
        return _rejected(tree, OperationError.INDEX_OUT_OF_RANGE)
    if not math.isfinite(container_size_px) or container_size_px <= 0:
        return _rejected(tree, OperationError.INVALID_CONTAINER)
    if not math.isfinite(pixel_delta):
        return _rejected(tree, OperationError.INVALID_DELTA)

    child_a = section.children[child_index]
    child_b = section.children[child_index + 1]

    # Huge weights can overflow the total; there is no usable scale then
    pixels_per_flex = container_size_px / section.total_flex
    if not math.isfinite(pixels_per_flex) or pixels_per_flex <= 0:
        return _rejected(tree, OperationError.INVALID_CONTAINER)
    flex_delta = pixel_delta / pixels_per_flex
    new_a = child_a.flex + flex_delta
    new_b = child_b.flex - flex_delta

    if new_a < min_flex or new_b < min_flex:
        logger.debug(
            f"Ignoring resize tick on '{section_id}'[{child_index}]: "
            f"({new_a:.3f}, {new_b:.3f}) below {min_flex}"
        )
        return _rejected(tree, OperationError.BELOW_MIN_FLEX)

    def _update(parent: Section) -> Section:
        children = list(parent.children)
        children[child_index] = child_a.with_flex(new_a)
        children[child_index + 1] = child_b.with_flex(new_b)
        return parent.with_children(children)

    return _applied(replace_section(tree, section_id, _update))
