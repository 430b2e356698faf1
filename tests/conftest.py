"""
Shared pytest fixtures and configuration for testmap tests.

This module provides:
- Settings / logging isolation between tests
- Sample component rule sets and registries
- Snapshot file helpers

Usage:
    Fixtures are auto-discovered by pytest. Use them as function arguments:

    def test_something(auth_component, registry):
        ...
"""

from __future__ import annotations

import json
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
import structlog

from testmap.core.logging import clear_context
from testmap.core.models import ComponentRuleSet, Matcher, TestOwnership
from testmap.core.registry import ComponentRegistry
from testmap.core.settings import clear_settings_cache
from testmap.core.snapshot import dumps


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "cli" in test_path.parts:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[None, None, None]:
    """
    Fresh settings and logging for every test.

    Runs each test from an empty directory so a developer's ``.env`` never
    leaks into settings, and drops any ``TESTMAP_*`` variables.
    """
    import os

    for key in list(os.environ):
        if key.startswith("TESTMAP_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)

    clear_settings_cache()
    clear_context()
    structlog.reset_defaults()
    yield
    clear_settings_cache()
    clear_context()
    structlog.reset_defaults()


# =============================================================================
# Sample Components
# =============================================================================


@pytest.fixture
def auth_component() -> ComponentRuleSet:
    """apiserver-auth style rule set: a low and a high priority matcher, one rename."""
    return ComponentRuleSet(
        name="apiserver-auth",
        default_jira_component="apiserver-auth",
        namespaces=("openshift-authentication",),
        matchers=(
            Matcher(include_all=("bz-apiserver-auth",)),
            Matcher(include_any=(":Authentication ", ":Authentication:"), priority=3),
        ),
        renames={"[apiserver-auth] pods ready": "[bz-apiserver-auth] pods ready"},
    )


@pytest.fixture
def machine_api_component() -> ComponentRuleSet:
    """Machine API style rule set matching by substring and by suite."""
    return ComponentRuleSet(
        name="Cloud Compute / Machine API Providers",
        default_jira_component="Cloud Compute / Machine API Providers",
        matchers=(
            Matcher(include_any=("[sig-cluster-lifecycle] Cluster_Infrastructure MAPI",), priority=1),
            Matcher(suite="Machine features testing"),
        ),
        variants=("Platform:aws",),
    )


@pytest.fixture
def registry(auth_component, machine_api_component) -> ComponentRegistry:
    """Unsealed registry with the two sample components, auth first."""
    return ComponentRegistry([auth_component, machine_api_component])


# =============================================================================
# Snapshot Helpers
# =============================================================================


@pytest.fixture
def make_record() -> Callable[..., TestOwnership]:
    """Factory for ownership records with sensible defaults."""

    def _make(name: str, suite: str = "", component: str = "apiserver-auth", **kwargs) -> TestOwnership:
        kwargs.setdefault("id", name)
        kwargs.setdefault("jira_component", component)
        return TestOwnership(name=name, suite=suite, component=component, **kwargs)

    return _make


@pytest.fixture
def write_snapshot_file(tmp_path: Path) -> Callable[[str, list], Path]:
    """Write records (or raw JSON-able data) to a file under tmp_path."""

    def _write(filename: str, records: list) -> Path:
        path = tmp_path / filename
        if records and isinstance(records[0], TestOwnership):
            path.write_text(dumps(records), encoding="utf-8")
        else:
            path.write_text(json.dumps(records), encoding="utf-8")
        return path

    return _write
