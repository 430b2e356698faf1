"""
CLI layer for testmap.

Provides a Typer application whose commands delegate to ``testmap.core`` and
``testmap.components``. This package handles only terminal transport:
argument parsing, coloured output, table formatting, exit codes.

Entry point::

    testmap --help
"""

from testmap.cli.app import app

__all__ = ["app"]
