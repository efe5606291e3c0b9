"""
Layout intents and affordances.

Input handling (keys, clicks, CLI arguments) produces an intent value
instead of calling engine functions directly; ``apply_intent`` is the
single place intents meet the engine. ``affordances_for`` tells a
renderer which actions to offer on a slot, so structurally invalid
actions are never shown in the first place.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Union

from ..config.constants import MIN_FLEX
from . import engine
from .engine import OperationResult
from .tree import Axis, Section, find_child


class Affordance(Enum):
    """Actions a renderer may offer on a slot."""

    SPLIT_ROW = "split-row"  # Split into side-by-side panes
    SPLIT_COLUMN = "split-column"  # Split into stacked panes
    REMOVE = "remove"
    ADD_ROW_ABOVE = "add-row-above"
    ADD_ROW_BELOW = "add-row-below"
    DISTRIBUTE = "distribute"
    ASSIGN_WIDGET = "assign-widget"
    REPLACE_WIDGET = "replace-widget"


class RowPosition(Enum):
    ABOVE = "above"
    BELOW = "below"


@dataclass(frozen=True)
class SplitIntent:
    section_id: str
    child_id: str
    axis: Axis


@dataclass(frozen=True)
class RemoveIntent:
    section_id: str
    child_id: str


@dataclass(frozen=True)
class AssignIntent:
    slot_id: str
    widget_id: str


@dataclass(frozen=True)
class AddRowIntent:
    section_id: str
    child_id: str
    position: RowPosition = RowPosition.BELOW


@dataclass(frozen=True)
class DistributeIntent:
    section_id: str


@dataclass(frozen=True)
class ResizeIntent:
    section_id: str
    child_index: int
    pixel_delta: float
    container_size_px: float


LayoutIntent = Union[
    SplitIntent, RemoveIntent, AssignIntent, AddRowIntent, DistributeIntent, ResizeIntent
]


def apply_intent(tree: Section, intent: LayoutIntent) -> OperationResult:
    """Run the engine operation an intent describes.

    Raises:
        TypeError: If ``intent`` is not a known intent type
    """
    if isinstance(intent, SplitIntent):
        return engine.split(tree, intent.section_id, intent.child_id, intent.axis)
    if isinstance(intent, RemoveIntent):
        return engine.remove_slot(tree, intent.section_id, intent.child_id)
    if isinstance(intent, AssignIntent):
        return engine.assign_widget(tree, intent.slot_id, intent.widget_id)
    if isinstance(intent, AddRowIntent):
        if intent.position is RowPosition.ABOVE:
            return engine.add_row_above(tree, intent.section_id, intent.child_id)
        return engine.add_row_below(tree, intent.section_id, intent.child_id)
    if isinstance(intent, DistributeIntent):
        return engine.distribute_evenly(tree, intent.section_id)
    if isinstance(intent, ResizeIntent):
        return engine.resize_siblings(
            tree,
            intent.section_id,
            intent.child_index,
            intent.pixel_delta,
            intent.container_size_px,
        )
    raise TypeError(f"Unknown layout intent: {type(intent).__name__}")


def affordances_for(tree: Section, slot_id: str) -> FrozenSet[Affordance]:
    """Actions that make sense for a slot in its current position.

    Splitting needs room for two halves above the minimum flex. Remove
    and distribute need siblings. Replacing only applies to a
    slot that already holds a widget; nested sections expose no slot
    actions at all.
    """
    located = find_child(tree, slot_id)
    if located is None:
        return frozenset()

    parent, index = located
    child = parent.children[index]
    if child.is_nested:
        return frozenset()

    allowed = {
        Affordance.ADD_ROW_ABOVE,
        Affordance.ADD_ROW_BELOW,
        Affordance.ASSIGN_WIDGET,
    }
    if child.flex / 2 >= MIN_FLEX:
        allowed.add(Affordance.SPLIT_ROW)
        allowed.add(Affordance.SPLIT_COLUMN)
    if len(parent.children) > 1:
        allowed.add(Affordance.REMOVE)
        allowed.add(Affordance.DISTRIBUTE)
    if child.is_widget:
        allowed.add(Affordance.REPLACE_WIDGET)
    return frozenset(allowed)
