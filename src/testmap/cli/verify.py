"""
CLI: ``testmap verify`` — gate a regenerated mapping against the published one.

Exit codes: 0 no regressions, 1 regressions found, 2 unreadable input.
"""

from __future__ import annotations

from pathlib import Path

import typer

from testmap.cli.utils import EXIT_BAD_INPUT, EXIT_FAILED, console, err_console, fail, print_json, print_table
from testmap.core.errors import SnapshotError
from testmap.core.logging import LogContext
from testmap.core.snapshot import read_snapshot
from testmap.core.verify import verify


def verify_mapping(
    reference: Path = typer.Option(..., "--reference", "-r", help="Previously published snapshot."),
    candidate: Path = typer.Option(..., "--candidate", "-c", help="Newly generated snapshot."),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Verify no test moves from an assigned component to Unknown."""
    with LogContext(reference=str(reference), candidate=str(candidate)):
        try:
            old = read_snapshot(reference)
            new = read_snapshot(candidate)
        except SnapshotError as e:
            fail(e, code=EXIT_BAD_INPUT)

        result = verify(old, new)

    if json_out:
        print_json(
            {
                "ok": result.ok,
                "checked": result.checked,
                "regressions": [
                    {"name": r.name, "suite": r.suite, "previous_component": r.previous_component}
                    for r in result.regressions
                ],
            }
        )
    elif result.regressions:
        print_table(list(result.regressions), title="Tests moved to Unknown")

    if not result.ok:
        err_console.print(
            f"[bold red]{len(result.regressions)} test(s) moved to Unknown.[/bold red] "
            "Components are not allowed to move to Unknown. Please assign correct ownership."
        )
        raise typer.Exit(code=EXIT_FAILED)

    if not json_out:
        console.print(f"[green]No ownership regressions[/green] ({result.checked} tests checked).")
