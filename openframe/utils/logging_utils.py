"""Logging utilities for openframe.

Standard Logger Initialization Pattern
--------------------------------------
Most modules use the standard Python pattern:

    import logging
    logger = logging.getLogger(__name__)

Configuration happens once at the application level: `setup_tui_logging`
for the designer and `configure_cli_logging` for the CLI.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Max log file size: 5MB, keep 2 backups
_MAX_LOG_BYTES = 5 * 1024 * 1024
_BACKUP_COUNT = 2

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_CLI_HANDLER_NAME = "openframe-cli"


def _log_dir() -> Path:
    # Inline path construction: logging may be needed before config is importable
    override = os.environ.get("OPENFRAME_CONFIG_DIR")
    log_dir = Path(override) if override else Path.home() / ".config" / "openframe"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _level_from_env(default: int = logging.INFO) -> int:
    name = os.environ.get("OPENFRAME_LOG_LEVEL", "").upper()
    return getattr(logging, name, default) if name else default


def configure_cli_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Route openframe.* loggers to stderr at a level chosen by CLI flags."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = _level_from_env(logging.WARNING)

    app_logger = logging.getLogger("openframe")
    app_logger.setLevel(level)

    # Replace our stderr handler so it follows the current sys.stderr
    for existing in list(app_logger.handlers):
        if existing.get_name() == _CLI_HANDLER_NAME:
            app_logger.removeHandler(existing)
    handler = logging.StreamHandler()
    handler.set_name(_CLI_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    app_logger.addHandler(handler)


def setup_tui_logging(module_name: str) -> logging.Logger:
    """
    Set up logging for the designer TUI.

    The root logger is set to WARNING to avoid noise from third-party
    libraries; openframe.* loggers pass at INFO. Everything goes to a
    rotating file because console output would corrupt the screen.
    """
    try:
        log_file = _log_dir() / "designer.log"

        if not logging.getLogger().handlers:
            handler = RotatingFileHandler(
                log_file, maxBytes=_MAX_LOG_BYTES, backupCount=_BACKUP_COUNT
            )
            handler.setFormatter(logging.Formatter(_FORMAT))
            logging.basicConfig(level=logging.WARNING, handlers=[handler])

        logging.getLogger("openframe").setLevel(_level_from_env())
        return logging.getLogger(module_name)

    except OSError as e:
        # We can't log this failure since logging is what's failing
        import sys

        print(f"Warning: TUI logging setup failed: {e}", file=sys.stderr)
        return logging.getLogger(module_name)
