"""
Layout store for per-profile layout documents and built-in templates.

The LayoutStore is responsible for:
- Loading a profile's layout document (JSON) with fallback to defaults
- Saving layout documents
- Listing and deleting profiles
- Loading built-in layout templates (YAML)
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from ..config.constants import DEFAULT_PROFILE, LAYOUT_DOCUMENT_VERSION
from ..config.settings import get_layouts_dir, is_valid_profile_name
from ..utils.error_handling import LayoutNotFoundError, LayoutValidationError, StoreError
from .tree import Section, default_tree, from_dict, to_dict, validation_errors, with_fresh_ids
from .widgets import WidgetRegistry

logger = logging.getLogger(__name__)

# Built-in templates directory (in package)
BUILTIN_TEMPLATES_DIR = Path(__file__).parent / "templates"


@dataclass
class LayoutDocument:
    """Everything stored for one profile: the tree and its widget instances.

    Attributes:
        profile: Profile the document belongs to
        tree: The layout tree
        widgets: Widget instances referenced by the tree
        recovered: True if the stored file was unusable and defaults were substituted
    """

    profile: str
    tree: Section = field(default_factory=default_tree)
    widgets: WidgetRegistry = field(default_factory=WidgetRegistry)
    recovered: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": LAYOUT_DOCUMENT_VERSION,
            "layout": to_dict(self.tree),
            "widgets": self.widgets.to_list(),
        }


@dataclass
class LayoutTemplate:
    """A built-in starting layout."""

    name: str
    description: str
    tree: Section


class LayoutStore:
    """Loads and saves layout documents, one JSON file per profile.

    Usage:
        store = LayoutStore()
        document = store.load("kitchen")
        document.tree = engine.split(document.tree, ...).tree
        store.save(document)
    """

    def __init__(self, layouts_dir: Optional[Path] = None) -> None:
        """Initialize the layout store.

        Args:
            layouts_dir: Directory for profile documents (defaults to config)
        """
        self.layouts_dir = layouts_dir or get_layouts_dir()

    def _path_for(self, profile: str) -> Path:
        if not is_valid_profile_name(profile):
            raise LayoutValidationError(
                f"Invalid profile name: {profile!r}",
                details="Use letters, digits, '-' and '_' only",
            )
        return self.layouts_dir / f"{profile}.json"

    def exists(self, profile: str) -> bool:
        return self._path_for(profile).exists()

    def load(self, profile: str = DEFAULT_PROFILE) -> LayoutDocument:
        """Load a profile's layout document.

        A missing file yields the default document. An unreadable or
        malformed file is recovered the same way and flagged with
        ``recovered=True``; it is never an error.

        Args:
            profile: Profile name

        Returns:
            LayoutDocument instance
        """
        path = self._path_for(profile)
        if not path.exists():
            return LayoutDocument(profile=profile)

        try:
            data = json.loads(path.read_text())
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning(f"Unreadable layout for profile '{profile}' ({path}): {e}")
            return LayoutDocument(profile=profile, recovered=True)

        return self.document_from_dict(profile, data)

    def document_from_dict(self, profile: str, data: Any) -> LayoutDocument:
        """Build a document from stored data, substituting defaults on bad shape."""
        if not isinstance(data, dict):
            logger.warning(f"Layout document for '{profile}' is not an object, using default")
            return LayoutDocument(profile=profile, recovered=True)

        # Bare trees (no envelope) are accepted as the layout itself
        layout_data = data.get("layout", data)
        widgets = WidgetRegistry.from_list(data.get("widgets") or [])

        errors = validation_errors(layout_data)
        if errors:
            logger.warning(f"Malformed layout for profile '{profile}': {'; '.join(errors[:3])}")
            return LayoutDocument(profile=profile, widgets=widgets, recovered=True)

        return LayoutDocument(profile=profile, tree=from_dict(layout_data), widgets=widgets)

    def save(self, document: LayoutDocument) -> Path:
        """Write a document to its profile file.

        Args:
            document: Document to save

        Returns:
            Path to saved file

        Raises:
            StoreError: If the file cannot be written
        """
        path = self._path_for(document.profile)
        try:
            self.layouts_dir.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            tmp_path.write_text(json.dumps(document.to_dict(), indent=2) + "\n")
            tmp_path.replace(path)
        except OSError as e:
            raise StoreError(f"Failed to save layout for '{document.profile}'", details=str(e)) from e

        logger.info(f"Saved layout to {path}")
        return path

    def delete(self, profile: str) -> bool:
        """Delete a profile's stored layout.

        Returns:
            True if a file was removed
        """
        path = self._path_for(profile)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Deleted layout {path}")
        return True

    def list_profiles(self) -> List[str]:
        """Names of profiles with a stored layout."""
        if not self.layouts_dir.exists():
            return []
        return sorted(path.stem for path in self.layouts_dir.glob("*.json"))


# =============================================================================
# Templates
# =============================================================================


def _template_path(name: str) -> Optional[Path]:
    for suffix in (".yaml", ".yml"):
        path = BUILTIN_TEMPLATES_DIR / f"{name}{suffix}"
        if path.exists():
            return path
    return None


def list_templates() -> List[Tuple[str, str]]:
    """List built-in templates as (name, description) pairs."""
    templates = []
    if BUILTIN_TEMPLATES_DIR.exists():
        for path in sorted(BUILTIN_TEMPLATES_DIR.glob("*.yaml")):
            try:
                data = yaml.safe_load(path.read_text()) or {}
            except yaml.YAMLError as e:
                logger.warning(f"Skipping unreadable template {path}: {e}")
                continue
            templates.append((path.stem, data.get("description", "")))
    return templates


def load_template(name: str) -> LayoutTemplate:
    """Load a built-in template, giving its nodes fresh ids.

    Args:
        name: Template name (without .yaml extension)

    Returns:
        LayoutTemplate instance

    Raises:
        LayoutNotFoundError: If no such template exists
        LayoutValidationError: If the template file is invalid
    """
    path = _template_path(name)
    if path is None:
        raise LayoutNotFoundError("Template", name)

    data = yaml.safe_load(path.read_text())
    if not data or "layout" not in data:
        raise LayoutValidationError(f"Empty layout template: {path}")

    errors = validation_errors(data["layout"])
    if errors:
        raise LayoutValidationError(f"Invalid layout template '{name}'", details="; ".join(errors))

    return LayoutTemplate(
        name=name,
        description=data.get("description", ""),
        tree=with_fresh_ids(from_dict(data["layout"])),
    )
