"""Pydantic models for component YAML validation.

Provides strong typing for declarative component rule files and converts
them into immutable ``ComponentRuleSet`` values.

Usage::

    from testmap.components.spec import ComponentSpec

    spec = ComponentSpec.model_validate(yaml_data)
    rule_set = spec.to_rule_set()

Example YAML::

    apiVersion: testmap.io/v1
    kind: Component
    metadata:
      name: apiserver-auth
    spec:
      jira:
        project: OCPBUGS
        defaultComponent: apiserver-auth
      namespaces: [openshift-authentication]
      matchers:
        - includeAll: [bz-apiserver-auth]
        - includeAny: [":Authentication ", ":Authentication:"]
          priority: 3
      renames:
        "[apiserver-auth] new name": "[bz-apiserver-auth] oldest name"

Semantic checks (unconstrained matchers, reserved names, variant format) are
left to ``ComponentRegistry.register`` so rule sets built in code and rule
sets read from YAML are held to the same rules.

Tags:
    testmap, components, yaml, declarative, config-driven
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from testmap.core.models import DEFAULT_JIRA_PROJECT, ComponentRuleSet, Matcher


class ComponentMetadataSpec(BaseModel):
    """Metadata section of a component spec."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, description="Unique component name")
    description: str = Field(default="", description="Human-readable description")


class JiraSpec(BaseModel):
    """JIRA routing for a component."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    project: str = Field(default=DEFAULT_JIRA_PROJECT, min_length=1)
    default_component: str | None = Field(
        default=None,
        alias="defaultComponent",
        description="Defaults to the component name",
    )


class MatcherSpec(BaseModel):
    """One matcher clause."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    include_all: list[str] = Field(default_factory=list, alias="includeAll")
    include_any: list[str] = Field(default_factory=list, alias="includeAny")
    suite: str | None = Field(default=None)
    priority: int = Field(default=0)
    jira_component: str | None = Field(default=None, alias="jiraComponent")
    capabilities: list[str] = Field(default_factory=list)

    def to_matcher(self) -> Matcher:
        return Matcher(
            include_all=tuple(self.include_all),
            include_any=tuple(self.include_any),
            suite=self.suite or None,
            priority=self.priority,
            jira_component=self.jira_component or None,
            capabilities=tuple(self.capabilities),
        )


class ComponentSpecSection(BaseModel):
    """The 'spec' section of a component file."""

    model_config = ConfigDict(extra="forbid")

    jira: JiraSpec = Field(default_factory=JiraSpec)
    namespaces: list[str] = Field(default_factory=list)
    variants: list[str] = Field(default_factory=list, description="Name:value job variants owned")
    matchers: list[MatcherSpec] = Field(default_factory=list)
    renames: dict[str, str] = Field(default_factory=dict, description="current name -> oldest name")


class ComponentSpec(BaseModel):
    """Complete component file. Root model for parsing YAML rule data."""

    model_config = ConfigDict(extra="forbid")

    apiVersion: Literal["testmap.io/v1"] = Field(default="testmap.io/v1")
    kind: Literal["Component"] = Field(default="Component")
    metadata: ComponentMetadataSpec
    spec: ComponentSpecSection = Field(default_factory=ComponentSpecSection)

    def to_rule_set(self, *, jira_project: str | None = None) -> ComponentRuleSet:
        """Convert to an immutable rule set.

        ``jira_project`` replaces the project only when the file did not set one.
        """
        jira = self.spec.jira
        project = jira.project
        if jira_project and "project" not in jira.model_fields_set:
            project = jira_project

        return ComponentRuleSet(
            name=self.metadata.name,
            default_jira_component=jira.default_component or self.metadata.name,
            jira_project=project,
            namespaces=tuple(self.spec.namespaces),
            matchers=tuple(m.to_matcher() for m in self.spec.matchers),
            renames=dict(self.spec.renames),
            variants=tuple(self.spec.variants),
            description=self.metadata.description,
        )
