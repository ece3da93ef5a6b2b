"""Unified CLI error handler for dataprivacy commands."""

from __future__ import annotations

import functools
import logging
import os
import traceback

import typer

from dataprivacy import ui
from dataprivacy.errors import (
    ConfigError,
    DataPrivacyError,
    ResponseParseError,
    TransportError,
)

logger = logging.getLogger("dataprivacy.error_handler")


def _debug_mode() -> bool:
    """Check if debug output is enabled via DATAPRIVACY_DEBUG env var."""
    return os.environ.get("DATAPRIVACY_DEBUG", "").lower() in ("1", "true", "yes")


def _render_error(e: DataPrivacyError) -> None:
    """Render a DataPrivacyError with Rich formatting and context."""
    console = ui.console
    message = e.describe() if isinstance(e, TransportError) else str(e)
    console.print(f"\n[bold red]Error:[/bold red] {message}")

    # Context details (only in debug mode)
    if e.context and _debug_mode():
        context_parts = [
            f"  [dim]{key}:[/dim] {value}" for key, value in e.context.items() if value
        ]
        if context_parts:
            console.print("[dim]Context:[/dim]")
            for part in context_parts:
                console.print(part)

    # Actionable hints based on error type
    if isinstance(e, TransportError):
        console.print("[dim]Check service.base_url with 'dataprivacy config show'.[/dim]")
    elif isinstance(e, ResponseParseError):
        console.print("[dim]The service returned an unexpected response.[/dim]")
    elif isinstance(e, ConfigError):
        console.print("[dim]Run 'dataprivacy config path' to find your config files.[/dim]")


def handle_errors(func):
    """Decorator that catches DataPrivacyError and renders formatted CLI output.

    Usage::

        @app.command()
        @handle_errors
        def my_command(...):
            ...  # no try/except needed
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DataPrivacyError as e:
            _render_error(e)
            if _debug_mode():
                ui.console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            raise typer.Exit(e.exit_code)
        except KeyboardInterrupt:
            ui.console.print("\n[dim]Interrupted.[/dim]")
            raise typer.Exit(130)
        except (typer.Exit, typer.Abort, SystemExit):
            raise
        except Exception as e:
            ui.console.print(f"\n[bold red]Unexpected error:[/bold red] {e}")
            if _debug_mode():
                ui.console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            else:
                ui.console.print("[dim]Set DATAPRIVACY_DEBUG=1 for full traceback.[/dim]")
            raise typer.Exit(1)

    return wrapper
