"""Configuration utilities for openframe."""

import os
import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .constants import (
    DEFAULT_PROFILE,
    ENV_VAR_DEFINITIONS,
    LAYOUTS_SUBDIR,
    OPENFRAME_CONFIG_DIR,
    PROFILE_NAME_PATTERN,
)


def get_config_dir() -> Path:
    """Get the base config directory, respecting OPENFRAME_CONFIG_DIR.

    Tests point OPENFRAME_CONFIG_DIR at a temp directory so they never
    touch the user's real layouts.
    """
    override = os.environ.get("OPENFRAME_CONFIG_DIR")
    if override:
        return Path(override)
    return OPENFRAME_CONFIG_DIR


def get_layouts_dir() -> Path:
    """Directory holding one JSON layout document per profile."""
    return get_config_dir() / LAYOUTS_SUBDIR


def get_default_profile() -> str:
    """Profile used when a command is not given --profile."""
    return get_env_var("OPENFRAME_PROFILE") or DEFAULT_PROFILE


def is_valid_profile_name(name: str) -> bool:
    """Profile names become file names, so keep them to a safe charset."""
    return re.fullmatch(PROFILE_NAME_PATTERN, name or "") is not None


def validate_env_var(name: str, value: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Validate a single environment variable value.

    Args:
        name: The environment variable name.
        value: The current value (or None if not set).

    Returns:
        Tuple of (is_valid, error_message).
    """
    if name not in ENV_VAR_DEFINITIONS:
        return True, None

    if value is None:
        return True, None

    valid_values = ENV_VAR_DEFINITIONS[name].get("valid_values")
    if valid_values is None:
        return True, None

    if value.upper() not in [v.upper() for v in valid_values]:
        return False, f"Invalid value '{value}' for {name}. Valid values: {valid_values}"

    return True, None


def validate_all_env_vars() -> List[str]:
    """Validate all openframe environment variables.

    Returns:
        List of error messages (empty if all valid).
    """
    errors = []
    for name in ENV_VAR_DEFINITIONS:
        is_valid, error = validate_env_var(name, os.environ.get(name))
        if not is_valid:
            errors.append(error)
    return errors


def get_env_var(name: str, validate: bool = True) -> Optional[str]:
    """Get an environment variable with optional validation.

    Args:
        name: The environment variable name.
        validate: Whether to validate the value against known definitions.

    Returns:
        The environment variable value, its default, or None.

    Raises:
        ValueError: If validate=True and the value is invalid.
    """
    value = os.environ.get(name)

    if validate and value is not None:
        is_valid, error = validate_env_var(name, value)
        if not is_valid:
            raise ValueError(error)

    if value is None and name in ENV_VAR_DEFINITIONS:
        return ENV_VAR_DEFINITIONS[name].get("default")

    return value


def get_env_info() -> Dict[str, Dict]:
    """Describe every openframe environment variable and its current state."""
    info = {}
    for name, definition in ENV_VAR_DEFINITIONS.items():
        value = os.environ.get(name)
        is_valid, _ = validate_env_var(name, value)
        info[name] = {
            "description": definition.get("description", ""),
            "value": value,
            "is_set": value is not None,
            "valid": is_valid,
            "default": definition.get("default"),
        }
    return info
