"""
CLI: ``testmap components`` — inspect and validate component rule sets.
"""

from __future__ import annotations

from pathlib import Path

import typer

from testmap.cli.utils import EXIT_BAD_INPUT, console, fail, load_registry, print_dict, print_json, print_table, run_settings
from testmap.core.errors import ComponentNotFoundError
from testmap.core.models import ComponentRuleSet

app = typer.Typer(no_args_is_help=True)


def _summary(rule_set: ComponentRuleSet) -> dict:
    return {
        "name": rule_set.name,
        "jira_project": rule_set.jira_project,
        "jira_components": rule_set.jira_components(),
        "namespaces": list(rule_set.namespaces),
        "matchers": len(rule_set.matchers),
        "renames": len(rule_set.renames),
        "variants": list(rule_set.variants),
    }


@app.command("list")
def list_components(
    components_dir: Path | None = typer.Option(None, "--components-dir"),
    no_bundled: bool = typer.Option(False, "--no-bundled"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List registered components."""
    registry = load_registry(run_settings(components_dir=components_dir, no_bundled=no_bundled))
    rows = [_summary(rs) for rs in registry]
    if json_out:
        print_json(rows)
        return
    print_table(rows, title="Components", columns=["name", "jira_project", "jira_components", "matchers", "renames"])


@app.command("show")
def show_component(
    name: str = typer.Argument(..., help="Component name."),
    components_dir: Path | None = typer.Option(None, "--components-dir"),
    no_bundled: bool = typer.Option(False, "--no-bundled"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one component's JIRA routing, namespaces and matchers."""
    registry = load_registry(run_settings(components_dir=components_dir, no_bundled=no_bundled))
    try:
        rule_set = registry.get(name)
    except ComponentNotFoundError as e:
        fail(e, code=EXIT_BAD_INPUT)

    summary = _summary(rule_set)
    summary["matchers"] = [
        {
            "include_all": list(m.include_all),
            "include_any": list(m.include_any),
            "suite": m.suite,
            "priority": m.priority,
            "jira_component": m.jira_component,
            "capabilities": list(m.capabilities),
        }
        for m in rule_set.matchers
    ]
    if json_out:
        print_json(summary)
        return

    matchers = summary.pop("matchers")
    print_dict(summary, title=rule_set.name)
    print_table(matchers, title="Matchers")


@app.command("validate")
def validate_components(
    components_dir: Path | None = typer.Option(None, "--components-dir"),
    no_bundled: bool = typer.Option(False, "--no-bundled"),
) -> None:
    """Load and validate every rule set; exits non-zero on the first error."""
    registry = load_registry(run_settings(components_dir=components_dir, no_bundled=no_bundled))
    console.print(f"[green]OK[/green] {len(registry)} components valid.")
