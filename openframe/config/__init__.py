"""Configuration for openframe."""

from .constants import DEFAULT_PROFILE, DISTRIBUTE_FLEX, MIN_FLEX
from .settings import (
    get_config_dir,
    get_default_profile,
    get_env_var,
    get_layouts_dir,
    is_valid_profile_name,
    validate_all_env_vars,
)

__all__ = [
    "DEFAULT_PROFILE",
    "DISTRIBUTE_FLEX",
    "MIN_FLEX",
    "get_config_dir",
    "get_default_profile",
    "get_env_var",
    "get_layouts_dir",
    "is_valid_profile_name",
    "validate_all_env_vars",
]
