"""
YAML loader for component rule sets.

Loads component definitions from YAML files with schema validation, and
assembles the registry used for a resolution run: the rule sets bundled
with the package, plus any directory configured by the user.

File Format (YAML):
    apiVersion: testmap.io/v1
    kind: Component
    metadata:
      name: Cloud Compute / Machine API Providers
    spec:
      matchers:
        - includeAny: ["[sig-cluster-lifecycle] Cluster_Infrastructure MAPI"]
          priority: 1
        - suite: Machine features testing
"""

from __future__ import annotations

from importlib import resources
from pathlib import Path

import yaml
from pydantic import ValidationError

from testmap.components.spec import ComponentSpec
from testmap.core.errors import ComponentSpecError
from testmap.core.logging import get_logger
from testmap.core.models import ComponentRuleSet
from testmap.core.registry import ComponentRegistry
from testmap.core.settings import TestmapSettings

logger = get_logger(__name__)

SUPPORTED_API_VERSIONS = {"testmap.io/v1"}


def parse_component(content: str, *, source: str = "<string>", jira_project: str | None = None) -> ComponentRuleSet:
    """Parse and validate one component document.

    Raises:
        ComponentSpecError: If the YAML is invalid or doesn't match the schema
    """
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ComponentSpecError(f"Invalid YAML in {source}: {e}", path=source, cause=e) from e

    if not isinstance(data, dict):
        raise ComponentSpecError(
            f"Expected a mapping in {source}, got {type(data).__name__}", path=source
        )

    api_version = data.get("apiVersion")
    if api_version and api_version not in SUPPORTED_API_VERSIONS:
        raise ComponentSpecError(
            f"Unsupported apiVersion in {source}: {api_version}. Supported: {sorted(SUPPORTED_API_VERSIONS)}",
            path=source,
        )

    try:
        spec = ComponentSpec.model_validate(data)
    except ValidationError as e:
        raise ComponentSpecError(f"Invalid component in {source}: {e}", path=source, cause=e) from e

    return spec.to_rule_set(jira_project=jira_project)


def load_component_from_yaml(path: Path | str, *, jira_project: str | None = None) -> ComponentRuleSet:
    """
    Load a single component rule set from a YAML file.

    Raises:
        ComponentSpecError: If the file is missing, unreadable or invalid
    """
    path = Path(path)

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ComponentSpecError(f"Cannot read component file {path}: {e}", path=str(path), cause=e) from e

    rule_set = parse_component(content, source=str(path), jira_project=jira_project)
    logger.debug("loader.loaded", path=str(path), component=rule_set.name, matchers=len(rule_set.matchers))
    return rule_set


def load_components_from_directory(
    directory: Path | str,
    pattern: str = "**/*.yaml",
    *,
    jira_project: str | None = None,
) -> list[ComponentRuleSet]:
    """
    Load every component file under ``directory``, sorted by path.

    Any invalid file aborts the load; a rule table is never partially applied.
    """
    directory = Path(directory)

    if not directory.is_dir():
        raise ComponentSpecError(f"Component directory not found: {directory}", path=str(directory))

    rule_sets = [
        load_component_from_yaml(path, jira_project=jira_project)
        for path in sorted(directory.glob(pattern))
        if path.is_file()
    ]

    logger.info("loader.directory_loaded", directory=str(directory), loaded=len(rule_sets))
    return rule_sets


def load_bundled_components(*, jira_project: str | None = None) -> list[ComponentRuleSet]:
    """Rule sets shipped in ``testmap/components/data``, sorted by file name."""
    data_dir = resources.files("testmap.components").joinpath("data")
    rule_sets = []
    for entry in sorted(data_dir.iterdir(), key=lambda e: e.name):
        if entry.name.endswith(".yaml"):
            source = f"testmap.components/data/{entry.name}"
            rule_sets.append(
                parse_component(entry.read_text(encoding="utf-8"), source=source, jira_project=jira_project)
            )
    logger.debug("loader.bundled_loaded", loaded=len(rule_sets))
    return rule_sets


def build_registry(settings: TestmapSettings) -> ComponentRegistry:
    """Registry for a run: bundled components first, then ``components_dir``."""
    registry = ComponentRegistry()
    if settings.include_bundled_components:
        registry.register_all(load_bundled_components(jira_project=settings.jira_project))
    if settings.components_dir is not None:
        registry.register_all(
            load_components_from_directory(settings.components_dir, jira_project=settings.jira_project)
        )
    logger.info("loader.registry_built", components=len(registry))
    return registry
