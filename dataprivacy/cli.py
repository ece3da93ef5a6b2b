#!/usr/bin/env python3
"""
dataprivacy: keep an application's telemetry flags in line with the
user's data opt-out status.
"""
import asyncio
import logging

import typer

from dataprivacy import ui
from dataprivacy.commands import config_cmd, prefs_cmd
from dataprivacy.error_handler import handle_errors

app = typer.Typer(
    name="dataprivacy",
    help="Telemetry opt-out status client.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(prefs_cmd.app, name="prefs", help="Inspect cached preferences", rich_help_panel="Advanced")
app.add_typer(config_cmd.app, name="config", help="Manage configuration", rich_help_panel="Advanced")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
    plain: bool = typer.Option(False, "--plain", help="Plain text output, no colors."),
):
    """Telemetry opt-out status client."""
    if plain:
        ui.set_plain_mode(True)

    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=ui.console, show_path=False)],
        force=True,
    )


@app.command(rich_help_panel="Status")
@handle_errors
def status():
    """Show configured flags, cached preferences and the effective result (offline)."""
    from dataprivacy.client import get_client
    from dataprivacy.flags import PERFORMANCE_REPORTING_ENABLED, LiveFlags
    from dataprivacy.prefs import load_status
    from dataprivacy.reconciler import reconcile

    client = get_client()
    configured = client.flags.snapshot()
    cached = load_status(client.store)

    # Preview on a copy; the client's own flags stay untouched
    effective = LiveFlags(
        **configured,
        performance_reporting_available=client.flags.is_available(PERFORMANCE_REPORTING_ENABLED),
    )
    reconcile(effective, cached)

    cached_flags = {name: getattr(cached, name) for name in configured}
    ui.console.print(ui.flags_table("Privacy Flags", {
        "Configured": configured,
        "Cached": cached_flags,
        "Effective": effective.snapshot(),
    }))
    ui.console.print(f"Cached opt-out: {'yes' if cached.opt_out else 'no'}")


@app.command(rich_help_panel="Status")
@handle_errors
def fetch(
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
):
    """[bold cyan]Fetch[/bold cyan] the opt-out status and apply it."""
    from dataprivacy.client import get_client

    client = get_client()
    opt_out = asyncio.run(client.fetch_opt_out_status())
    flags = client.flags.snapshot()

    if as_json:
        ui.print_json_output({"opt_out": opt_out, "flags": flags})
        return

    ui.console.print(ui.flags_table("Live Flags", {"Value": flags}))
    if opt_out:
        ui.console.print("[warning]User has opted out of data collection.[/warning]")
    else:
        ui.console.print("[success]No opt-out in effect.[/success]")


@app.command("privacy-url", rich_help_panel="Status")
@handle_errors
def privacy_url():
    """Fetch the tokenized privacy dashboard URL."""
    from dataprivacy.client import get_client

    errors: list[str] = []
    url = asyncio.run(get_client().fetch_privacy_url(lambda u: None, errors.append))
    if url is None:
        ui.console.print(f"[error]Could not fetch privacy URL:[/error] {errors[0]}")
        raise typer.Exit(1)
    if not url:
        ui.console.print("[warning]Service returned no URL.[/warning]")
        return
    ui.console.print(url)


def main():
    app()


if __name__ == "__main__":
    main()
