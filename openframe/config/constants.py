"""
Centralized constants for openframe.

Numeric floors and defaults used by the layout engine, the store and
the designer live here so the engine, CLI and renderer agree on them.
"""

from pathlib import Path

# =============================================================================
# PATHS
# =============================================================================

OPENFRAME_CONFIG_DIR = Path.home() / ".config" / "openframe"
LAYOUTS_SUBDIR = "layouts"

# =============================================================================
# LAYOUT ENGINE
# =============================================================================

MIN_FLEX = 0.1  # Floor below which a pane may not shrink
DISTRIBUTE_FLEX = 1.0  # Weight given to every child by distribute-evenly
DEFAULT_FLEX = 1.0  # Weight of the single pane in a fresh layout
ROOT_SECTION_ID = "root"
DEFAULT_SLOT_ID = "main"  # Pane of a fresh layout

# =============================================================================
# LAYOUT STORE
# =============================================================================

DEFAULT_PROFILE = "default"
LAYOUT_DOCUMENT_VERSION = 1
PROFILE_NAME_PATTERN = r"[A-Za-z0-9_-]+"

# =============================================================================
# DESIGNER (TUI)
# =============================================================================

SPLITTER_THICKNESS = 1  # Cells occupied by a splitter handle
DEFAULT_CONTAINER_SIZE_PX = 400  # Container size assumed by the CLI resize command

# =============================================================================
# ENVIRONMENT VARIABLES
# =============================================================================

ENV_VAR_DEFINITIONS = {
    "OPENFRAME_CONFIG_DIR": {
        "description": "Base directory for layouts and logs",
        "default": None,
        "valid_values": None,
    },
    "OPENFRAME_PROFILE": {
        "description": "Profile whose layout is edited when --profile is not given",
        "default": DEFAULT_PROFILE,
        "valid_values": None,
    },
    "OPENFRAME_LOG_LEVEL": {
        "description": "Log level for openframe loggers",
        "default": "INFO",
        "valid_values": ["DEBUG", "INFO", "WARNING", "ERROR"],
    },
}
