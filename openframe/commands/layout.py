"""Layout commands for openframe.

This module provides CLI commands for editing a profile's layout without
the designer:
- show: Print the layout tree
- split / remove / assign / add-row / distribute / resize: Engine operations
- reset: Replace the layout with the default single pane
- validate: Check a layout file without loading it into a profile
- templates / apply-template: Built-in starting layouts
- export: Write the stored document as JSON
- profiles: List profiles with a stored layout

Widget instances are managed by the ``widgets`` sub-app.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import typer
import yaml
from rich.table import Table
from rich.tree import Tree

from openframe.config.constants import DEFAULT_CONTAINER_SIZE_PX, DISTRIBUTE_FLEX, MIN_FLEX
from openframe.config.settings import get_default_profile
from openframe.layout import engine
from openframe.layout.store import LayoutDocument, LayoutStore, list_templates, load_template
from openframe.layout.tree import (
    Axis,
    Child,
    Section,
    default_tree,
    find_child,
    find_section,
    iter_children,
    validation_errors,
)
from openframe.layout.widgets import widget_catalog
from openframe.utils.error_handling import (
    LayoutOperationError,
    LayoutValidationError,
    WidgetTypeError,
    handle_cli_error,
)
from openframe.utils.output import console, print_json

logger = logging.getLogger(__name__)

app = typer.Typer(help="Edit a profile's split-pane layout")
widgets_app = typer.Typer(help="Manage widget instances placed in layouts")

PROFILE_HELP = "Profile to edit (default: $OPENFRAME_PROFILE or 'default')"


# =============================================================================
# Helpers
# =============================================================================


def _load(profile: Optional[str]) -> Tuple[LayoutStore, LayoutDocument]:
    store = LayoutStore()
    document = store.load(profile or get_default_profile())
    if document.recovered:
        console.print(
            f"[yellow]Stored layout for '{document.profile}' was unreadable; "
            f"using the default layout[/yellow]"
        )
    return store, document


def _commit(
    store: LayoutStore,
    document: LayoutDocument,
    result: engine.OperationResult,
    operation: str,
) -> None:
    """Save the result of an engine operation, or report why it was refused."""
    if not result.ok:
        raise LayoutOperationError(result.message, details=f"{operation} on profile '{document.profile}'")
    document.tree = result.tree
    store.save(document)


def _parse_axis(value: str) -> Axis:
    try:
        return Axis.from_value(value)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def _child_label(child: Child, document: LayoutDocument) -> str:
    flex = f"[dim]flex {child.flex:g}[/dim]"
    if child.is_widget:
        name = document.widgets.display_name(child.widget_id)
        if name is None:
            return f"{child.id} {flex} [red]missing widget {child.widget_id}[/red]"
        return f"{child.id} {flex} [green]{name}[/green] [dim]({child.widget_id})[/dim]"
    if child.is_empty:
        return f"{child.id} {flex} [dim]empty[/dim]"
    return f"{child.id} {flex}"


def _add_section(node: Tree, section: Section, document: LayoutDocument) -> None:
    for child in section.children:
        branch = node.add(_child_label(child, document))
        if child.is_nested:
            nested = child.section
            inner = branch.add(f"[bold cyan]{nested.axis.value}[/bold cyan] {nested.id}")
            _add_section(inner, nested, document)


def render_tree(document: LayoutDocument) -> Tree:
    """Build a Rich tree view of a document's layout."""
    root = document.tree
    tree = Tree(
        f"[bold]{document.profile}[/bold]: [bold cyan]{root.axis.value}[/bold cyan] {root.id}"
    )
    _add_section(tree, root, document)
    return tree


# =============================================================================
# Layout commands
# =============================================================================


@app.command("show")
@handle_cli_error("showing layout")
def show(
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output the document as JSON"),
):
    """Show the layout tree of a profile.

    Examples:
        openframe layout show
        openframe layout show --profile kitchen --json
    """
    _, document = _load(profile)
    if json_output:
        print_json(document.to_dict())
        return
    console.print(render_tree(document))


@app.command("split")
@handle_cli_error("splitting pane")
def split(
    section_id: str = typer.Argument(..., help="Section containing the pane"),
    child_id: str = typer.Argument(..., help="Pane to split"),
    axis: str = typer.Option("row", "--axis", "-a", help="Axis of the new panes: row or column"),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
):
    """Split a pane in two along an axis.

    The pane's content moves to the first half; the second half is empty.
    """
    store, document = _load(profile)
    result = engine.split(document.tree, section_id, child_id, _parse_axis(axis))
    _commit(store, document, result, "split")

    nested_id, first_id, second_id = result.new_ids
    console.print(f"[green]✓ Split {child_id} into {first_id} and {second_id}[/green]")
    console.print(f"[dim]New section: {nested_id}[/dim]")


@app.command("remove")
@handle_cli_error("removing pane")
def remove(
    section_id: str = typer.Argument(..., help="Section containing the pane"),
    child_id: str = typer.Argument(..., help="Pane to remove"),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
):
    """Remove a pane. A section's last pane cannot be removed."""
    store, document = _load(profile)
    _commit(store, document, engine.remove_slot(document.tree, section_id, child_id), "remove")
    console.print(f"[green]✓ Removed {child_id}[/green]")


@app.command("assign")
@handle_cli_error("assigning widget")
def assign(
    slot_id: str = typer.Argument(..., help="Pane to fill"),
    widget_id: str = typer.Argument(..., help="Widget instance id (see 'widgets list')"),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
):
    """Place an existing widget instance in a pane, replacing what was there."""
    store, document = _load(profile)
    if widget_id not in document.widgets:
        console.print(
            f"[yellow]Widget '{widget_id}' is not registered; the pane will render empty[/yellow]"
        )
    _commit(store, document, engine.assign_widget(document.tree, slot_id, widget_id), "assign")
    console.print(f"[green]✓ Assigned {widget_id} to {slot_id}[/green]")


@app.command("add-row")
@handle_cli_error("adding row")
def add_row(
    section_id: str = typer.Argument(..., help="Section containing the pane"),
    child_id: str = typer.Argument(..., help="Pane next to which the row is inserted"),
    above: bool = typer.Option(False, "--above", help="Insert before the pane instead of after"),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
):
    """Insert an empty pane next to another in the same section."""
    store, document = _load(profile)
    operation = engine.add_row_above if above else engine.add_row_below
    result = operation(document.tree, section_id, child_id)
    _commit(store, document, result, "add-row")
    console.print(f"[green]✓ Added {result.new_ids[0]}[/green]")


@app.command("distribute")
@handle_cli_error("distributing panes")
def distribute(
    section_id: str = typer.Argument(..., help="Section whose panes are equalized"),
    flex: float = typer.Option(DISTRIBUTE_FLEX, "--flex", help="Weight given to every pane"),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
):
    """Give every pane of a section the same weight. Nested sections keep their ratios."""
    if flex < MIN_FLEX:
        raise typer.BadParameter(f"--flex must be at least {MIN_FLEX:g}")
    store, document = _load(profile)
    _commit(store, document, engine.distribute_evenly(document.tree, section_id, flex), "distribute")
    console.print(f"[green]✓ Distributed {section_id}[/green]")


@app.command("resize")
@handle_cli_error("resizing panes")
def resize(
    section_id: str = typer.Argument(..., help="Section containing the pair"),
    index: int = typer.Argument(..., help="Index of the first pane of the pair"),
    delta: float = typer.Argument(..., help="Boundary movement in pixels (negative shrinks the first pane)"),
    container: float = typer.Option(
        DEFAULT_CONTAINER_SIZE_PX, "--container", "-c", help="Section length in pixels"
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
):
    """Move the boundary between two adjacent panes, as a drag would.

    Examples:
        openframe layout resize section-1a2b 0 40 --container 400
    """
    store, document = _load(profile)
    result = engine.resize_siblings(document.tree, section_id, index, delta, container)
    _commit(store, document, result, "resize")
    section = find_section(result.tree, section_id)
    first, second = section.children[index], section.children[index + 1]
    console.print(
        f"[green]✓ Resized {first.id} to {first.flex:g} and {second.id} to {second.flex:g}[/green]"
    )


@app.command("reset")
@handle_cli_error("resetting layout")
def reset(
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Replace the layout with a single empty pane. Widget instances are kept."""
    store, document = _load(profile)
    if not yes:
        typer.confirm(f"Reset the layout of '{document.profile}'?", abort=True)
    document.tree = default_tree()
    store.save(document)
    console.print(f"[green]✓ Reset layout for '{document.profile}'[/green]")


@app.command("validate")
@handle_cli_error("validating layout")
def validate(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Layout file (JSON or YAML)"),
):
    """Check a layout file's shape without storing it."""
    text = file.read_text()
    try:
        if file.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise LayoutValidationError(f"Could not parse {file.name}", details=str(e)) from e

    if isinstance(data, dict) and "layout" in data:
        data = data["layout"]
    errors = validation_errors(data)
    if errors:
        raise LayoutValidationError(f"{file.name} is not a valid layout", details="\n".join(errors))
    console.print(f"[green]✓ {file.name} is a valid layout[/green]")


@app.command("templates")
@handle_cli_error("listing templates")
def templates():
    """List built-in layout templates."""
    available = list_templates()
    if not available:
        console.print("[yellow]No templates found[/yellow]")
        return

    table = Table(title="Layout templates")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    for name, description in available:
        table.add_row(name, description)
    console.print(table)


@app.command("apply-template")
@handle_cli_error("applying template")
def apply_template(
    name: str = typer.Argument(..., help="Template name (see 'layout templates')"),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Replace a profile's layout with a built-in template."""
    template = load_template(name)
    store, document = _load(profile)
    if store.exists(document.profile) and not yes:
        typer.confirm(f"Replace the layout of '{document.profile}' with '{name}'?", abort=True)
    document.tree = template.tree
    store.save(document)
    console.print(f"[green]✓ Applied template '{name}' to '{document.profile}'[/green]")


@app.command("export")
@handle_cli_error("exporting layout")
def export(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to a file instead of stdout"),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
):
    """Export a profile's layout document as JSON."""
    _, document = _load(profile)
    if output is None:
        print_json(document.to_dict())
        return
    output.write_text(json.dumps(document.to_dict(), indent=2) + "\n")
    console.print(f"[green]✓ Exported '{document.profile}' to {output}[/green]")


@app.command("profiles")
@handle_cli_error("listing profiles")
def profiles():
    """List profiles that have a stored layout."""
    names = LayoutStore().list_profiles()
    if not names:
        console.print("[yellow]No stored layouts[/yellow]")
        return
    default = get_default_profile()
    for name in names:
        marker = " [dim](default)[/dim]" if name == default else ""
        console.print(f"{name}{marker}")


# =============================================================================
# Widget commands
# =============================================================================


@widgets_app.command("types")
@handle_cli_error("listing widget types")
def widget_types():
    """List the widget types that can be placed in a pane."""
    table = Table(title="Widget types")
    table.add_column("Type", style="cyan")
    table.add_column("Name")
    table.add_column("Category", style="dim")
    table.add_column("Description")
    for definition in widget_catalog.list_definitions():
        table.add_row(definition.widget_type, definition.name, definition.category, definition.description)
    console.print(table)


@widgets_app.command("list")
@handle_cli_error("listing widgets")
def widget_list(
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List a profile's widget instances and the panes showing them."""
    _, document = _load(profile)
    placements = {instance.id: None for instance in document.widgets.instances()}
    for _, _, child in iter_children(document.tree):
        if child.is_widget and child.widget_id in placements:
            placements[child.widget_id] = child.id

    if json_output:
        print_json(
            [
                {**instance.to_dict(), "slot": placements[instance.id]}
                for instance in document.widgets.instances()
            ]
        )
        return

    if not placements:
        console.print("[yellow]No widgets[/yellow]")
        return

    table = Table(title=f"Widgets in '{document.profile}'")
    table.add_column("Id", style="cyan")
    table.add_column("Type")
    table.add_column("Pane")
    for instance in document.widgets.instances():
        table.add_row(instance.id, instance.widget_type, placements[instance.id] or "[dim]unplaced[/dim]")
    console.print(table)


@widgets_app.command("add")
@handle_cli_error("adding widget")
def widget_add(
    widget_type: str = typer.Argument(..., help="Widget type (see 'widgets types')"),
    slot_id: Optional[str] = typer.Option(None, "--slot", "-s", help="Pane to place the widget in"),
    config: Optional[str] = typer.Option(None, "--config", help="Config overrides as JSON"),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help=PROFILE_HELP),
):
    """Create a widget instance, optionally placing it in a pane.

    Examples:
        openframe widgets add clock
        openframe widgets add weather --slot slot-1a2b3c --config '{"forecastDays": 5}'
    """
    overrides = None
    if config:
        try:
            overrides = json.loads(config)
        except json.JSONDecodeError as e:
            raise WidgetTypeError("Config is not valid JSON", details=str(e)) from e
        if not isinstance(overrides, dict):
            raise WidgetTypeError("Config must be a JSON object")

    store, document = _load(profile)
    if slot_id is not None and find_child(document.tree, slot_id) is None:
        raise LayoutOperationError(engine.OperationError.SLOT_NOT_FOUND.value, details=slot_id)

    instance = document.widgets.create(widget_type, overrides)
    if slot_id is None:
        store.save(document)
    else:
        _commit(store, document, engine.assign_widget(document.tree, slot_id, instance.id), "assign")

    placed = f" in {slot_id}" if slot_id else ""
    console.print(f"[green]✓ Created {instance.id}{placed}[/green]")
