"""Error handling utilities and decorators for consistent error patterns.

This module provides:
- Custom exception classes for openframe-specific errors
- A decorator for CLI command error handling

The layout engine itself never raises for structural problems; it
returns failed results instead. These exceptions cover the layers
around it: loading documents, the widget registry and the CLI.
"""

import functools
import logging
from typing import Any, Callable, Optional, TypeVar

import typer
from rich.console import Console

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Custom Exception Classes
# =============================================================================


class OpenframeError(Exception):
    """Base exception for all openframe-specific errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class LayoutValidationError(OpenframeError):
    """A layout document failed shape validation."""

    pass


class LayoutNotFoundError(OpenframeError):
    """A layout template or profile document does not exist."""

    def __init__(self, resource_type: str, identifier: Any):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} '{identifier}' not found")


class LayoutOperationError(OpenframeError):
    """An engine operation was rejected (reported by the CLI only)."""

    pass


class WidgetTypeError(OpenframeError):
    """Unknown widget type or invalid widget configuration."""

    pass


class StoreError(OpenframeError):
    """Reading or writing the layout store failed."""

    pass


# =============================================================================
# CLI Error Handling Decorator
# =============================================================================


def handle_cli_error(
    operation: str,
    console: Optional[Console] = None,
    exit_code: int = 1,
    log_traceback: bool = True,
) -> Callable[[F], F]:
    """Decorator for consistent CLI command error handling.

    Args:
        operation: Description of the operation for error messages
        console: Rich Console instance for output (creates one if not provided)
        exit_code: Exit code to use on error (default: 1)
        log_traceback: Whether to log the full traceback (default: True)

    Usage:
        @app.command()
        @handle_cli_error("splitting pane")
        def split(section_id: str, child_id: str):
            ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            _console = console or Console()
            try:
                return func(*args, **kwargs)
            except typer.Exit:
                raise
            except typer.Abort:
                _console.print(f"[yellow]{operation.capitalize()} cancelled[/yellow]")
                raise typer.Exit(0) from None
            except LayoutNotFoundError as e:
                _console.print(f"[red]Error: {e.message}[/red]")
                raise typer.Exit(exit_code) from e
            except LayoutOperationError as e:
                _console.print(f"[red]Could not complete {operation}: {e.message}[/red]")
                if e.details:
                    _console.print(f"[dim]{e.details}[/dim]")
                raise typer.Exit(exit_code) from e
            except LayoutValidationError as e:
                _console.print(f"[red]Validation error: {e.message}[/red]")
                if e.details:
                    _console.print(f"[dim]{e.details}[/dim]")
                raise typer.Exit(exit_code) from e
            except OpenframeError as e:
                _console.print(f"[red]Error {operation}: {e.message}[/red]")
                if e.details:
                    _console.print(f"[dim]{e.details}[/dim]")
                if log_traceback:
                    logger.error(f"Error during {operation}: {e}", exc_info=True)
                raise typer.Exit(exit_code) from e
            except Exception as e:
                _console.print(f"[red]Error {operation}: {e}[/red]")
                if log_traceback:
                    logger.error(f"Unexpected error during {operation}: {e}", exc_info=True)
                raise typer.Exit(exit_code) from e

        return wrapper  # type: ignore[return-value]

    return decorator
