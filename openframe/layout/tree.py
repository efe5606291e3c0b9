"""
Layout tree data model.

A layout is a recursive tree of sections. A section splits its area
along one axis among ordered children; each child carries a relative
``flex`` weight and holds either a widget reference, a nested section,
or nothing. Nodes are frozen dataclasses: every mutation rebuilds the
path from the changed section up to the root and shares the rest.
"""

import logging
import math
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Set, Tuple, Union

from ..config.constants import DEFAULT_FLEX, DEFAULT_SLOT_ID, MIN_FLEX, ROOT_SECTION_ID

logger = logging.getLogger(__name__)


class Axis(Enum):
    """Direction along which a section lays out its children."""

    ROW = "row"  # Side by side, sized by width
    COLUMN = "column"  # Stacked, sized by height

    @classmethod
    def from_value(cls, value: Any) -> "Axis":
        """Parse an axis, accepting the planner's legacy direction names.

        Examples:
            >>> Axis.from_value("row")
            <Axis.ROW: 'row'>
            >>> Axis.from_value("vertical")
            <Axis.COLUMN: 'column'>
        """
        if isinstance(value, Axis):
            return value
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in _LEGACY_DIRECTIONS:
                return _LEGACY_DIRECTIONS[normalized]
            for axis in cls:
                if axis.value == normalized:
                    return axis
        raise ValueError(f"Invalid axis '{value}'. Must be one of: row, column")

    @property
    def other(self) -> "Axis":
        return Axis.COLUMN if self is Axis.ROW else Axis.ROW


_LEGACY_DIRECTIONS = {"horizontal": Axis.ROW, "vertical": Axis.COLUMN}


@dataclass(frozen=True)
class EmptyContent:
    """A slot with nothing assigned."""


@dataclass(frozen=True)
class WidgetContent:
    """A slot bound to a widget instance id (resolved by the registry)."""

    widget_id: str


@dataclass(frozen=True)
class NestedContent:
    """A slot that is itself split into a section."""

    section: "Section"


Content = Union[EmptyContent, WidgetContent, NestedContent]

EMPTY = EmptyContent()


@dataclass(frozen=True)
class Child:
    """One element of a section's children.

    Attributes:
        id: Unique id within the whole tree
        flex: Relative weight within the parent section
        content: Empty, widget reference, or nested section
    """

    id: str
    flex: float = DEFAULT_FLEX
    content: Content = EMPTY

    @property
    def is_empty(self) -> bool:
        return isinstance(self.content, EmptyContent)

    @property
    def is_widget(self) -> bool:
        return isinstance(self.content, WidgetContent)

    @property
    def is_nested(self) -> bool:
        return isinstance(self.content, NestedContent)

    @property
    def widget_id(self) -> Optional[str]:
        if isinstance(self.content, WidgetContent):
            return self.content.widget_id
        return None

    @property
    def section(self) -> Optional["Section"]:
        if isinstance(self.content, NestedContent):
            return self.content.section
        return None

    def with_flex(self, flex: float) -> "Child":
        return replace(self, flex=flex)

    def with_content(self, content: Content) -> "Child":
        return replace(self, content=content)


@dataclass(frozen=True)
class Section:
    """A container splitting its area among children along one axis.

    Attributes:
        id: Unique id within the whole tree
        axis: Row (side by side) or column (stacked)
        children: Ordered, non-empty tuple of children
    """

    id: str
    axis: Axis
    children: Tuple[Child, ...]

    def __post_init__(self) -> None:
        """Normalize children to a tuple and enforce the non-empty rule."""
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))
        if not self.children:
            raise ValueError(f"Section '{self.id}' must have at least one child")

    @property
    def total_flex(self) -> float:
        return sum(child.flex for child in self.children)

    def index_of(self, child_id: str) -> Optional[int]:
        """Position of a direct child, or None."""
        for index, child in enumerate(self.children):
            if child.id == child_id:
                return index
        return None

    def with_children(self, children: Any) -> "Section":
        return replace(self, children=tuple(children))

    def with_axis(self, axis: Axis) -> "Section":
        return replace(self, axis=axis)


# =============================================================================
# Construction
# =============================================================================


def generate_id(prefix: str = "slot") -> str:
    """Generate a unique node id, usable as-is in widget ids and CSS."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def default_tree() -> Section:
    """The layout every profile starts with: one full-weight empty pane.

    Ids are fixed so that a profile that was never saved shows the same
    pane id on every load.
    """
    return Section(
        id=ROOT_SECTION_ID,
        axis=Axis.ROW,
        children=(Child(id=DEFAULT_SLOT_ID, flex=DEFAULT_FLEX),),
    )


def with_fresh_ids(section: Section) -> Section:
    """Copy a tree giving every section and child a new id.

    Used when a template is applied so that two layouts built from the
    same template never share ids. The root keeps its id.
    """

    def _copy(node: Section, new_id: str) -> Section:
        children = []
        for child in node.children:
            content = child.content
            if isinstance(content, NestedContent):
                content = NestedContent(_copy(content.section, generate_id("section")))
            children.append(Child(id=generate_id(), flex=child.flex, content=content))
        return Section(id=new_id, axis=node.axis, children=tuple(children))

    return _copy(section, section.id)


# =============================================================================
# Depth-first lookup
# =============================================================================


def iter_sections(tree: Section) -> Iterator[Section]:
    """Yield every section, depth-first, parents before children."""
    yield tree
    for child in tree.children:
        if isinstance(child.content, NestedContent):
            yield from iter_sections(child.content.section)


def iter_children(tree: Section) -> Iterator[Tuple[Section, int, Child]]:
    """Yield (parent, index, child) for every child in the tree, depth-first."""
    for index, child in enumerate(tree.children):
        yield tree, index, child
        if isinstance(child.content, NestedContent):
            yield from iter_children(child.content.section)


def find_section(tree: Section, section_id: str) -> Optional[Section]:
    """Find a section by id anywhere in the tree."""
    for section in iter_sections(tree):
        if section.id == section_id:
            return section
    return None


def find_child(tree: Section, child_id: str) -> Optional[Tuple[Section, int]]:
    """Find a child by id, returning its parent section and index."""
    for parent, index, child in iter_children(tree):
        if child.id == child_id:
            return parent, index
    return None


def replace_section(
    tree: Section, section_id: str, update: Callable[[Section], Section]
) -> Optional[Section]:
    """Rebuild the tree with one section replaced by ``update(section)``.

    Only the path from the root to the target is copied; untouched
    subtrees are shared with the input tree.

    Returns:
        The new root, or None if no section has ``section_id``.
    """
    if tree.id == section_id:
        return update(tree)

    for index, child in enumerate(tree.children):
        if not isinstance(child.content, NestedContent):
            continue
        updated = replace_section(child.content.section, section_id, update)
        if updated is not None:
            children = list(tree.children)
            children[index] = child.with_content(NestedContent(updated))
            return tree.with_children(children)

    return None


# =============================================================================
# Serialization
# =============================================================================


def child_to_dict(child: Child) -> Dict[str, Any]:
    result: Dict[str, Any] = {"id": child.id, "flex": child.flex}
    content = child.content
    if isinstance(content, WidgetContent):
        result["type"] = "widget"
        result["widgetId"] = content.widget_id
    elif isinstance(content, NestedContent):
        result["type"] = "section"
        result["section"] = to_dict(content.section)
    else:
        result["type"] = "empty"
    return result


def to_dict(tree: Section) -> Dict[str, Any]:
    """Convert a tree to nested JSON-compatible dictionaries."""
    return {
        "id": tree.id,
        "axis": tree.axis.value,
        "children": [child_to_dict(child) for child in tree.children],
    }


def _unwrap(data: Any) -> Any:
    # Planner documents wrap the root as {"sections": [root]}
    if isinstance(data, Mapping) and "children" not in data and "sections" in data:
        sections = data.get("sections")
        if isinstance(sections, list) and sections:
            return sections[0]
    return data


def child_from_dict(data: Mapping[str, Any]) -> Child:
    child_type = data.get("type", "empty")
    flex = float(data.get("flex", DEFAULT_FLEX))

    if child_type == "section":
        content: Content = NestedContent(from_dict(data["section"]))
    elif child_type == "widget" and data.get("widgetId"):
        content = WidgetContent(str(data["widgetId"]))
    else:
        # Legacy planner slots are "widget" with no widgetId when empty
        content = EMPTY

    return Child(id=str(data["id"]), flex=flex, content=content)


def from_dict(data: Mapping[str, Any]) -> Section:
    """Build a tree from its dictionary form.

    Accepts the legacy ``direction`` key in place of ``axis``. Callers
    loading untrusted documents should check ``validate`` first or use
    ``load_tree_or_default``.

    Raises:
        ValueError, KeyError, TypeError: If the document is malformed
    """
    data = _unwrap(data)
    axis = Axis.from_value(data.get("axis", data.get("direction")))
    children = tuple(child_from_dict(c) for c in data["children"])
    return Section(id=str(data["id"]), axis=axis, children=children)


# =============================================================================
# Validation
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _document_errors(
    data: Any, seen_ids: Set[str], min_flex: float, path: str
) -> List[str]:
    errors: List[str] = []

    if not isinstance(data, Mapping):
        return [f"{path}: section must be an object"]

    section_id = data.get("id")
    if not isinstance(section_id, str) or not section_id:
        errors.append(f"{path}: section id must be a non-empty string")
    elif section_id in seen_ids:
        errors.append(f"{path}: duplicate id '{section_id}'")
    else:
        seen_ids.add(section_id)

    try:
        Axis.from_value(data.get("axis", data.get("direction")))
    except ValueError as e:
        errors.append(f"{path}: {e}")

    children = data.get("children")
    if not isinstance(children, list) or not children:
        errors.append(f"{path}: children must be a non-empty list")
        return errors

    for index, child in enumerate(children):
        child_path = f"{path}.children[{index}]"
        if not isinstance(child, Mapping):
            errors.append(f"{child_path}: child must be an object")
            continue

        child_id = child.get("id")
        if not isinstance(child_id, str) or not child_id:
            errors.append(f"{child_path}: child id must be a non-empty string")
        elif child_id in seen_ids:
            errors.append(f"{child_path}: duplicate id '{child_id}'")
        else:
            seen_ids.add(child_id)

        flex = child.get("flex", DEFAULT_FLEX)
        if not _is_number(flex):
            errors.append(f"{child_path}: flex must be a number")
        elif flex < min_flex:
            errors.append(f"{child_path}: flex {flex} is below the minimum {min_flex}")

        child_type = child.get("type", "empty")
        if child_type == "section":
            errors.extend(
                _document_errors(child.get("section"), seen_ids, min_flex, f"{child_path}.section")
            )
        elif child_type == "widget":
            widget_id = child.get("widgetId")
            if widget_id is not None and not isinstance(widget_id, str):
                errors.append(f"{child_path}: widgetId must be a string")
        elif child_type != "empty":
            errors.append(f"{child_path}: unknown child type '{child_type}'")

    return errors


def validation_errors(data: Any, min_flex: float = MIN_FLEX) -> List[str]:
    """List every shape or invariant problem in a layout document or tree.

    Args:
        data: A raw dictionary (e.g. loaded JSON) or a Section
        min_flex: Floor every child's flex must respect

    Returns:
        List of error messages (empty if valid)
    """
    if isinstance(data, Section):
        data = to_dict(data)
    return _document_errors(_unwrap(data), set(), min_flex, "root")


def validate(data: Any, min_flex: float = MIN_FLEX) -> bool:
    """True if ``data`` is a well-formed layout satisfying every invariant."""
    return not validation_errors(data, min_flex)


def load_tree_or_default(data: Any, min_flex: float = MIN_FLEX) -> Section:
    """Build a tree from a stored document, substituting the default on failure."""
    errors = validation_errors(data, min_flex)
    if errors:
        logger.warning(f"Discarding malformed layout document: {errors[0]}")
        return default_tree()
    return from_dict(data)
