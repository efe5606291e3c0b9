"""
Split-pane layout engine for openframe dashboards and kiosks.

Provides:
- A recursive layout tree (sections of weighted children)
- Pure tree operations (split, remove, assign, add row, distribute, resize)
- A drag controller turning pointer movement into resize ticks
- Intents and affordances decoupling input from the engine
- A widget registry, an editing session and a per-profile store

Example usage:
    from openframe.layout import Axis, LayoutEditor, LayoutStore

    store = LayoutStore()
    document = store.load("kitchen")
    editor = LayoutEditor(document.tree, document.widgets)
    slot = editor.slot_ids()[0]
    editor.on_split("root", slot, Axis.COLUMN)
"""

from .drag import DragController, DragSession, DragState, PointerCapture
from .engine import (
    OperationError,
    OperationResult,
    add_row_above,
    add_row_below,
    assign_widget,
    distribute_evenly,
    remove_slot,
    resize_siblings,
    set_section_children,
    split,
)
from .intents import (
    AddRowIntent,
    Affordance,
    AssignIntent,
    DistributeIntent,
    RemoveIntent,
    ResizeIntent,
    RowPosition,
    SplitIntent,
    affordances_for,
    apply_intent,
)
from .session import LayoutEditor, SlotInfo
from .store import LayoutDocument, LayoutStore, LayoutTemplate, list_templates, load_template
from .tree import (
    EMPTY,
    Axis,
    Child,
    EmptyContent,
    NestedContent,
    Section,
    WidgetContent,
    default_tree,
    find_child,
    find_section,
    from_dict,
    load_tree_or_default,
    to_dict,
    validate,
    validation_errors,
)
from .widgets import (
    WidgetCatalog,
    WidgetDefinition,
    WidgetInstance,
    WidgetRegistry,
    widget_catalog,
)

__all__ = [
    # Tree
    "Axis",
    "Child",
    "EMPTY",
    "EmptyContent",
    "NestedContent",
    "Section",
    "WidgetContent",
    "default_tree",
    "find_child",
    "find_section",
    "from_dict",
    "load_tree_or_default",
    "to_dict",
    "validate",
    "validation_errors",
    # Engine
    "OperationError",
    "OperationResult",
    "add_row_above",
    "add_row_below",
    "assign_widget",
    "distribute_evenly",
    "remove_slot",
    "resize_siblings",
    "set_section_children",
    "split",
    # Drag
    "DragController",
    "DragSession",
    "DragState",
    "PointerCapture",
    # Intents
    "AddRowIntent",
    "Affordance",
    "AssignIntent",
    "DistributeIntent",
    "RemoveIntent",
    "ResizeIntent",
    "RowPosition",
    "SplitIntent",
    "affordances_for",
    "apply_intent",
    # Session
    "LayoutEditor",
    "SlotInfo",
    # Store
    "LayoutDocument",
    "LayoutStore",
    "LayoutTemplate",
    "list_templates",
    "load_template",
    # Widgets
    "WidgetCatalog",
    "WidgetDefinition",
    "WidgetInstance",
    "WidgetRegistry",
    "widget_catalog",
]
