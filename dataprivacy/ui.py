"""Shared UI theme, console, and display helpers for dataprivacy."""

import json

from rich.console import Console
from rich.table import Table
from rich.theme import Theme

# ── Output Mode State ──
_plain_mode: bool = False


def set_plain_mode(enabled: bool = True) -> None:
    """Enable or disable plain text output (no colors, no highlighting)."""
    global _plain_mode, console
    _plain_mode = enabled
    if enabled:
        console = Console(no_color=True, highlight=False)
    else:
        console = Console(theme=DATAPRIVACY_THEME)


def is_plain() -> bool:
    """Check if plain output mode is active."""
    return _plain_mode


def print_json_output(data: dict | list) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))


# ── Theme ──
DATAPRIVACY_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
    "flag.on": "green",
    "flag.off": "red",
    "muted": "dim",
})

console = Console(theme=DATAPRIVACY_THEME)


def _flag_cell(value: bool) -> str:
    if _plain_mode:
        return "on" if value else "off"
    return "[flag.on]on[/flag.on]" if value else "[flag.off]off[/flag.off]"


def flags_table(title: str, columns: dict[str, dict[str, bool]]) -> Table:
    """Build a table with one row per flag and one column per source.

    ``columns`` maps a column heading to a flag-name -> value dict;
    flags missing from a column render as ``-``.
    """
    table = Table(title=title, show_header=True)
    table.add_column("Flag", style="cyan")
    for heading in columns:
        table.add_column(heading)

    names: list[str] = []
    for values in columns.values():
        for name in values:
            if name not in names:
                names.append(name)

    for name in names:
        cells = [
            _flag_cell(values[name]) if name in values else "-"
            for values in columns.values()
        ]
        table.add_row(name, *cells)
    return table
