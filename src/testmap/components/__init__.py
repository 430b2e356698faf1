"""Declarative component rule sets (YAML) and registry assembly."""

from testmap.components.loader import (
    build_registry,
    load_bundled_components,
    load_component_from_yaml,
    load_components_from_directory,
    parse_component,
)
from testmap.components.spec import ComponentSpec, MatcherSpec

__all__ = [
    "ComponentSpec",
    "MatcherSpec",
    "parse_component",
    "load_component_from_yaml",
    "load_components_from_directory",
    "load_bundled_components",
    "build_registry",
]
