"""CLI commands for the cached preference store."""
from __future__ import annotations

import typer

from dataprivacy import ui
from dataprivacy.error_handler import handle_errors

app = typer.Typer(
    name="prefs",
    help="Inspect cached privacy preferences.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@app.command()
@handle_errors
def show():
    """Show the cached privacy status and where it is stored."""
    from rich.table import Table
    from dataprivacy.client import get_client
    from dataprivacy.prefs import STATUS_KEYS

    store = get_client().store
    table = Table(title="Cached Preferences", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, (_attr, default) in STATUS_KEYS.items():
        value = store.get_int(key, default)
        table.add_row(key, str(value))
    ui.console.print(table)

    path = getattr(store, "path", None)
    if path is not None:
        exists = "exists" if path.exists() else "not saved yet"
        ui.console.print(f"[dim]Stored in {path} ({exists})[/dim]")


@app.command()
@handle_errors
def reset(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
):
    """Delete the cached privacy status."""
    from dataprivacy.client import get_client

    store = get_client().store
    if not hasattr(store, "clear"):
        ui.console.print("[warning]This preference store cannot be cleared.[/warning]")
        raise typer.Exit(1)

    if not yes:
        typer.confirm("Delete cached privacy preferences?", abort=True)

    if store.clear():
        ui.console.print("[green]Cached preferences removed.[/green]")
    else:
        ui.console.print("[yellow]No cached preferences found.[/yellow]")
