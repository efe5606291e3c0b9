"""
Widget catalog and instance registry for the layout system.

Widget *types* (clock, weather, tasks...) register a definition with
defaults and an optional config schema in the catalog. Widget
*instances* are created from a type and live in a ``WidgetRegistry``
keyed by instance id; layout slots reference instances by id only, and
the renderer resolves them through ``WidgetRegistry.lookup``.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..utils.error_handling import WidgetTypeError

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


_TYPE_CHECKS: Dict[str, Callable[[Any], bool]] = {
    "number": _is_number,
    "string": lambda value: isinstance(value, str),
    "boolean": lambda value: isinstance(value, bool),
    "array": lambda value: isinstance(value, list),
}


@dataclass
class WidgetDefinition:
    """Registration information for a widget type.

    Attributes:
        widget_type: Unique type name, e.g. "calendar-day"
        name: Human-readable name shown in pickers
        category: Grouping for pickers ("calendar", "content", "layout", "tracking")
        description: One-line description
        default_config: Configuration merged under every new instance's config
        config_schema: Optional schema for validating instance config
        module_id: Optional feature module the widget depends on
    """

    widget_type: str
    name: str
    category: str = "content"
    description: str = ""
    default_config: Dict[str, Any] = field(default_factory=dict)
    config_schema: Optional[Dict[str, Any]] = None
    module_id: Optional[str] = None

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """Check instance config against ``config_schema``; returns error messages.

        Schema entries may give a ``type``, an ``enum`` of allowed values,
        and ``min``/``max`` bounds for numbers. Absent keys fall back to
        the defaults and are not checked.
        """
        errors = []
        for key, rules in (self.config_schema or {}).items():
            if key not in config:
                continue
            value = config[key]
            check = _TYPE_CHECKS.get(rules.get("type"))
            if check is not None and not check(value):
                errors.append(f"{key}: expected {rules['type']}, got {value!r}")
                continue
            if "enum" in rules and value not in rules["enum"]:
                errors.append(f"{key}: {value!r} is not one of {', '.join(map(str, rules['enum']))}")
            if _is_number(value):
                if value < rules.get("min", value):
                    errors.append(f"{key}: {value} is below {rules['min']}")
                if value > rules.get("max", value):
                    errors.append(f"{key}: {value} is above {rules['max']}")
        return errors


class WidgetCatalog:
    """Registry of widget types.

    Usage:
        widget_catalog.register(WidgetDefinition("clock", "Clock"))
        definition = widget_catalog.get("clock")
    """

    def __init__(self) -> None:
        self._definitions: Dict[str, WidgetDefinition] = {}

    def register(self, definition: WidgetDefinition) -> None:
        if definition.widget_type in self._definitions:
            logger.warning(f"Overwriting existing widget type: {definition.widget_type}")
        self._definitions[definition.widget_type] = definition

    def unregister(self, widget_type: str) -> bool:
        return self._definitions.pop(widget_type, None) is not None

    def get(self, widget_type: str) -> Optional[WidgetDefinition]:
        return self._definitions.get(widget_type)

    def has(self, widget_type: str) -> bool:
        return widget_type in self._definitions

    def list_types(self) -> List[str]:
        return sorted(self._definitions)

    def list_definitions(self) -> List[WidgetDefinition]:
        return [self._definitions[t] for t in self.list_types()]


@dataclass
class WidgetInstance:
    """A configured widget placed (or placeable) in a layout slot."""

    id: str
    widget_type: str
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.widget_type, "config": dict(self.config)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WidgetInstance":
        return cls(
            id=str(data["id"]),
            widget_type=str(data["type"]),
            config=dict(data.get("config") or {}),
        )


class WidgetRegistry:
    """Widget instances by id, as consumed by the renderer.

    A layout may reference ids that are not (or no longer) registered;
    ``lookup`` returns None for those and the renderer shows the slot
    as empty without touching the tree.
    """

    def __init__(
        self,
        instances: Iterable[WidgetInstance] = (),
        catalog: Optional[WidgetCatalog] = None,
    ) -> None:
        self.catalog = catalog or widget_catalog
        self._instances: Dict[str, WidgetInstance] = {}
        for instance in instances:
            self.add(instance)

    def __len__(self) -> int:
        return len(self._instances)

    def __contains__(self, widget_id: object) -> bool:
        return widget_id in self._instances

    def lookup(self, widget_id: Optional[str]) -> Optional[WidgetInstance]:
        if widget_id is None:
            return None
        return self._instances.get(widget_id)

    def add(self, instance: WidgetInstance) -> WidgetInstance:
        self._instances[instance.id] = instance
        return instance

    def create(
        self, widget_type: str, config: Optional[Dict[str, Any]] = None
    ) -> WidgetInstance:
        """Create and register a new instance of ``widget_type``.

        Args:
            widget_type: Registered widget type name
            config: Overrides merged over the type's default config

        Returns:
            The new instance

        Raises:
            WidgetTypeError: If the type is unknown or the config is invalid
        """
        definition = self.catalog.get(widget_type)
        if definition is None:
            raise WidgetTypeError(
                f"Unknown widget type: {widget_type}",
                details=f"Available: {', '.join(self.catalog.list_types())}",
            )

        merged = {**definition.default_config, **(config or {})}
        errors = definition.validate_config(merged)
        if errors:
            raise WidgetTypeError(f"Invalid config for '{widget_type}'", details="; ".join(errors))

        instance = WidgetInstance(
            id=f"widget-{uuid.uuid4().hex[:12]}",
            widget_type=widget_type,
            config=merged,
        )
        logger.info(f"Created widget {instance.id} of type {widget_type}")
        return self.add(instance)

    def remove(self, widget_id: str) -> bool:
        return self._instances.pop(widget_id, None) is not None

    def instances(self) -> List[WidgetInstance]:
        return list(self._instances.values())

    def display_name(self, widget_id: Optional[str]) -> Optional[str]:
        """Human name for a referenced widget, or None if it is dangling."""
        instance = self.lookup(widget_id)
        if instance is None:
            return None
        definition = self.catalog.get(instance.widget_type)
        return definition.name if definition else instance.widget_type

    def to_list(self) -> List[Dict[str, Any]]:
        return [instance.to_dict() for instance in self._instances.values()]

    @classmethod
    def from_list(
        cls, data: Iterable[Dict[str, Any]], catalog: Optional[WidgetCatalog] = None
    ) -> "WidgetRegistry":
        """Rebuild a registry from stored instances, skipping malformed entries."""
        instances = []
        for entry in data or ():
            try:
                instances.append(WidgetInstance.from_dict(entry))
            except (KeyError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed widget entry {entry!r}: {e}")
        return cls(instances, catalog=catalog)


# Global widget catalog instance
widget_catalog = WidgetCatalog()


def register_builtin_widgets(catalog: Optional[WidgetCatalog] = None) -> None:
    """Register the planner/dashboard widget types."""
    catalog = catalog or widget_catalog
    builtins = [
        WidgetDefinition(
            "calendar-day",
            "Day Schedule",
            category="calendar",
            description="Single day schedule with time slots",
            default_config={"showTimeSlots": True, "startHour": 6, "endHour": 22},
            config_schema={
                "startHour": {"type": "number", "min": 0, "max": 23},
                "endHour": {"type": "number", "min": 1, "max": 24},
            },
        ),
        WidgetDefinition(
            "calendar-week",
            "Week View",
            category="calendar",
            description="7-day week layout",
            default_config={"showDayNames": True, "weekStartsOn": 0},
            config_schema={"weekStartsOn": {"type": "number", "min": 0, "max": 6}},
        ),
        WidgetDefinition(
            "calendar-month",
            "Month Grid",
            category="calendar",
            description="Full month calendar grid",
            default_config={"highlightToday": True, "weekStartsOn": 0},
        ),
        WidgetDefinition(
            "tasks",
            "Task List",
            category="content",
            description="Checklist with checkboxes",
            default_config={"maxItems": 10, "includeCompleted": False},
            config_schema={"maxItems": {"type": "number", "min": 1, "max": 50}},
        ),
        WidgetDefinition(
            "news-headlines",
            "News Headlines",
            category="content",
            description="List of news article titles",
            default_config={"maxItems": 5, "showSource": True},
            module_id="news",
        ),
        WidgetDefinition(
            "weather",
            "Weather Forecast",
            category="content",
            description="Weather conditions and forecast",
            default_config={"showHighLow": True, "forecastDays": 3},
            config_schema={"forecastDays": {"type": "number", "min": 1, "max": 7}},
            module_id="weather",
        ),
        WidgetDefinition(
            "notes",
            "Notes Area",
            category="layout",
            description="Blank area with ruled lines for writing",
            default_config={"title": "Notes", "lineStyle": "ruled"},
            config_schema={"lineStyle": {"enum": ["ruled", "dotted", "grid", "blank"]}},
        ),
        WidgetDefinition(
            "text",
            "Text / Header",
            category="layout",
            description="Static text, title, or label",
            default_config={"text": "{{date}}", "textAlign": "center"},
            config_schema={"text": {"type": "string"}},
        ),
        WidgetDefinition(
            "divider",
            "Divider",
            category="layout",
            description="Separator line",
            default_config={"style": "solid"},
        ),
        WidgetDefinition(
            "habits",
            "Habit Tracker",
            category="tracking",
            description="Monthly habit tracking grid",
            default_config={"habits": ["Exercise", "Read", "Meditate"]},
            config_schema={"habits": {"type": "array"}},
        ),
        WidgetDefinition(
            "ai-briefing",
            "AI Briefing",
            category="content",
            description="AI-generated daily summary",
            default_config={"title": "Daily Briefing"},
            module_id="ai-briefing",
        ),
        WidgetDefinition(
            "email-highlights",
            "Email Highlights",
            category="content",
            description="Important messages from the inbox",
            default_config={"maxItems": 5},
            module_id="gmail",
        ),
        WidgetDefinition(
            "clock",
            "Clock",
            category="content",
            description="Current time and date",
            default_config={"format24h": False, "showSeconds": False},
            config_schema={"format24h": {"type": "boolean"}},
        ),
        WidgetDefinition(
            "photos",
            "Photo Slideshow",
            category="content",
            description="Rotating photos from an album",
            default_config={"intervalSeconds": 30},
            config_schema={"intervalSeconds": {"type": "number", "min": 5}},
            module_id="photos",
        ),
    ]
    for definition in builtins:
        catalog.register(definition)

    logger.debug("Registered built-in widget types")


register_builtin_widgets()
