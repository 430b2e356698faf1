"""
Root Typer application for the testmap CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from testmap.core.logging import configure_logging
from testmap.core.settings import get_settings

app = Typer(
    name="testmap",
    help="testmap — ownership metadata for CI test results.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        from testmap import __version__

        try:
            v = pkg_version("testmap")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"testmap {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Override TESTMAP_LOG_LEVEL."),
) -> None:
    """testmap CLI — resolve test ownership, verify mappings, inspect components."""
    settings = get_settings()
    configure_logging(level=log_level or settings.log_level, json_format=settings.json_logs)


# ── Sub-command registration ─────────────────────────────────────────────

from testmap.cli.components import app as components_app  # noqa: E402
from testmap.cli.map import map_tests  # noqa: E402
from testmap.cli.variants import map_variants  # noqa: E402
from testmap.cli.verify import verify_mapping  # noqa: E402

app.command("map")(map_tests)
app.command("verify")(verify_mapping)
app.command("variants")(map_variants)
app.add_typer(components_app, name="components", help="Component rule set inspection.")
