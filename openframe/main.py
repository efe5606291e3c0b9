#!/usr/bin/env python3
"""
Main CLI entry point for openframe
"""

from typing import Optional

import typer

from openframe import __version__
from openframe.commands.layout import app as layout_app
from openframe.commands.layout import widgets_app
from openframe.config.settings import get_default_profile, validate_all_env_vars
from openframe.utils.error_handling import handle_cli_error
from openframe.utils.logging_utils import configure_cli_logging
from openframe.utils.output import console

app = typer.Typer(
    name="openframe",
    help="Split-pane layout engine for dashboards and kiosks",
    no_args_is_help=True,
)


# Callback for global options
@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output"),
):
    """
    openframe - split-pane layouts for dashboards and kiosks

    [bold]Examples:[/bold]

    Show the current layout:
        [cyan]openframe layout show[/cyan]

    Split the first pane into two columns:
        [cyan]openframe layout split root slot-1a2b3c --axis row[/cyan]

    Start from a template:
        [cyan]openframe layout apply-template daily-planner --profile kitchen[/cyan]

    Edit interactively:
        [cyan]openframe design --profile kitchen[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)

    for error in validate_all_env_vars():
        typer.echo(f"Warning: {error}", err=True)

    configure_cli_logging(verbose=verbose, quiet=quiet)


@app.command()
def version():
    """Show openframe version"""
    typer.echo(f"openframe version {__version__}")


@app.command()
@handle_cli_error("launching designer", console=console)
def design(
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help="Profile to edit"),
):
    """Open the interactive layout designer."""
    from openframe.ui.layout.designer import run_designer

    run_designer(profile or get_default_profile())


app.add_typer(layout_app, name="layout")
app.add_typer(widgets_app, name="widgets")


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
