"""
CLI utility helpers — output formatting, error exits and registry assembly.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from testmap.components.loader import build_registry
from testmap.core.errors import TestmapError
from testmap.core.registry import ComponentRegistry
from testmap.core.settings import TestmapSettings, get_settings

console = Console()
err_console = Console(stderr=True)

# Exit codes
EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


# ── Settings / registry helpers ──────────────────────────────────────────


def run_settings(
    *,
    components_dir: Path | None = None,
    no_bundled: bool = False,
    **overrides: Any,
) -> TestmapSettings:
    """Cached settings with command-line overrides applied."""
    update = {k: v for k, v in overrides.items() if v is not None}
    if components_dir is not None:
        update["components_dir"] = components_dir
    if no_bundled:
        update["include_bundled_components"] = False
    return get_settings().model_copy(update=update)


def load_registry(settings: TestmapSettings) -> ComponentRegistry:
    """Build the registry or exit with the configuration error."""
    try:
        return build_registry(settings)
    except TestmapError as e:
        fail(e, code=EXIT_BAD_INPUT)


def fail(error: TestmapError, *, code: int = EXIT_FAILED) -> NoReturn:
    """Print a typed error and exit."""
    err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}")
    raise typer.Exit(code=code)


# ── Output helpers ───────────────────────────────────────────────────────


def to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def print_json(payload: Any) -> None:
    """Plain JSON on stdout, unwrapped so it stays machine-readable."""
    typer.echo(json.dumps(payload, indent=2, default=str))


def print_table(items: list, *, title: str = "", columns: list[str] | None = None) -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    if not items:
        console.print("[dim]No items.[/dim]")
        return
    rows = [to_dict(item) for item in items]
    columns = columns or list(rows[0])
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in columns:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*(_cell(row.get(col)) for col in columns))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {_cell(v)}")


def _cell(value: Any) -> str:
    if isinstance(value, list | tuple):
        return escape(", ".join(str(v) for v in value))
    return "" if value is None else escape(str(value))
