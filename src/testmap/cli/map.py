"""
CLI: ``testmap map`` — resolve a materialized test list into a snapshot.
"""

from __future__ import annotations

from pathlib import Path

import typer

from testmap.cli.utils import EXIT_BAD_INPUT, EXIT_FAILED, err_console, fail, load_registry, run_settings
from testmap.core.errors import ConfigError, SnapshotError
from testmap.core.resolver import OwnershipResolver
from testmap.core.snapshot import dumps, read_tests, write_snapshot


def map_tests(
    tests: Path = typer.Option(..., "--tests", "-t", help="JSON array of {name, suite, variants}."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Snapshot file (default: stdout)."),
    components_dir: Path | None = typer.Option(None, "--components-dir", help="Extra component YAML directory."),
    no_bundled: bool = typer.Option(False, "--no-bundled", help="Skip the bundled component rule sets."),
    allow_ambiguous: bool = typer.Option(
        False, "--allow-ambiguous", help="Warn instead of failing on equal-priority claims."
    ),
    workers: int | None = typer.Option(None, "--workers", "-w", min=1, help="Resolution threads."),
) -> None:
    """Assign an owner to every test and write the ownership snapshot."""
    settings = run_settings(
        components_dir=components_dir,
        no_bundled=no_bundled,
        max_workers=workers,
        strict_ambiguity=False if allow_ambiguous else None,
    )
    registry = load_registry(settings)

    try:
        test_list = read_tests(tests)
    except SnapshotError as e:
        fail(e, code=EXIT_BAD_INPUT)

    resolver = OwnershipResolver(registry, strict=settings.strict_ambiguity, product=settings.product)
    try:
        records = resolver.resolve_all(test_list, max_workers=settings.max_workers)
    except ConfigError as e:
        fail(e, code=EXIT_FAILED)

    if output is None:
        typer.echo(dumps(records))
    else:
        write_snapshot(records, output)

    unknown = sum(1 for r in records if r.is_unknown)
    err_console.print(
        f"Mapped [bold]{len(records)}[/bold] tests across {len(registry)} components "
        f"({unknown} Unknown)."
    )
