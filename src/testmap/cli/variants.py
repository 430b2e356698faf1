"""
CLI: ``testmap variants`` — emit variant ownership records.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path

import typer

from testmap.cli.utils import err_console, load_registry, print_json, run_settings
from testmap.core.variants import identify_variants


def map_variants(
    output: Path | None = typer.Option(None, "--output", "-o", help="JSON file (default: stdout)."),
    components_dir: Path | None = typer.Option(None, "--components-dir"),
    no_bundled: bool = typer.Option(False, "--no-bundled"),
) -> None:
    """List the job variants each component claims."""
    settings = run_settings(components_dir=components_dir, no_bundled=no_bundled)
    registry = load_registry(settings)
    records = [asdict(r) for r in identify_variants(registry, product=settings.product)]

    if output is None:
        print_json(records)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(records, indent=2) + "\n", encoding="utf-8")
    err_console.print(f"Wrote {len(records)} variant mappings to {output}.")
