"""
Data model for ownership resolution.

All types here are immutable values. Rule sets are data, not behavior: every
component is described by the same ``ComponentRuleSet`` shape and evaluated by
the same algorithm, so adding a team means adding data.

Types:
    TestInfo          — a test instance to classify (name, suite, variants)
    Matcher           — one rule clause within a component's rule set
    ComponentRuleSet  — per-team configuration (JIRA targets, matchers, renames)
    TestOwnership     — the resolved ownership record for one test
    Regression        — a test that lost its owner between two snapshots
    VariantOwnership  — a job variant claimed by a component

Tags:
    testmap, models, dataclass, immutable
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

TEST_OWNERSHIP_API_VERSION = "v1"
TEST_OWNERSHIP_KIND = "TestOwnership"
VARIANT_OWNERSHIP_API_VERSION = "v1"
VARIANT_OWNERSHIP_KIND = "VariantOwnership"

DEFAULT_JIRA_PROJECT = "OCPBUGS"

UNKNOWN_COMPONENT = "Unknown"


def _unique(values: Iterable[str]) -> tuple[str, ...]:
    """Deduplicate, keeping first-seen order."""
    return tuple(dict.fromkeys(values))


@dataclass(frozen=True)
class TestInfo:
    """A test instance to classify.

    ``variants`` holds ``Name:value`` job variants the test was observed under;
    it is stored as a frozenset, so order and duplicates in the input do not
    matter.
    """

    __test__ = False

    name: str
    suite: str = ""
    variants: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        if not isinstance(self.variants, frozenset):
            object.__setattr__(self, "variants", frozenset(self.variants))

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.suite)


@dataclass(frozen=True)
class Matcher:
    """One rule clause of a component.

    A matcher fires when every constraint it sets holds: all ``include_all``
    substrings present, at least one ``include_any`` substring present, and
    ``suite`` equal to the test's suite. Unset constraints do not restrict.
    """

    include_all: tuple[str, ...] = ()
    include_any: tuple[str, ...] = ()
    suite: str | None = None
    priority: int = 0
    jira_component: str | None = None
    capabilities: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "include_all", _unique(self.include_all))
        object.__setattr__(self, "include_any", _unique(self.include_any))
        object.__setattr__(self, "capabilities", _unique(self.capabilities))
        if not self.suite:
            object.__setattr__(self, "suite", None)

    @property
    def is_constrained(self) -> bool:
        """False for a matcher that would match every test."""
        return bool(self.include_all or self.include_any or self.suite)

    @property
    def has_blank_pattern(self) -> bool:
        """True when an include pattern is empty or whitespace-only; such a pattern matches every test."""
        return any(not s.strip() for s in self.include_all + self.include_any)


@dataclass(frozen=True)
class ComponentRuleSet:
    """Declarative ownership rules for one component."""

    name: str
    default_jira_component: str
    jira_project: str = DEFAULT_JIRA_PROJECT
    namespaces: tuple[str, ...] = ()
    matchers: tuple[Matcher, ...] = ()
    renames: Mapping[str, str] = field(default_factory=dict, hash=False)
    variants: tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "namespaces", _unique(self.namespaces))
        object.__setattr__(self, "matchers", tuple(self.matchers))
        object.__setattr__(self, "variants", _unique(self.variants))
        object.__setattr__(self, "renames", MappingProxyType(dict(self.renames)))

    def jira_components(self) -> list[str]:
        """Default JIRA component followed by every matcher override."""
        components = [self.default_jira_component]
        components.extend(m.jira_component for m in self.matchers if m.jira_component)
        return list(_unique(components))


UNKNOWN = ComponentRuleSet(
    name=UNKNOWN_COMPONENT,
    default_jira_component=UNKNOWN_COMPONENT,
    description="Fallback owner for tests no component claims",
)


@dataclass(frozen=True)
class TestOwnership:
    """Resolved ownership for one test.

    Records are created once per resolution pass and never edited; a later
    pass produces new records. ``capabilities`` is kept sorted so snapshots
    diff cleanly.
    """

    __test__ = False

    name: str
    suite: str
    id: str
    component: str
    jira_component: str
    jira_project: str = DEFAULT_JIRA_PROJECT
    priority: int = 0
    capabilities: tuple[str, ...] = ()
    product: str = ""
    staff_approved_obsolete: bool = False
    api_version: str = TEST_OWNERSHIP_API_VERSION
    kind: str = TEST_OWNERSHIP_KIND

    def __post_init__(self) -> None:
        object.__setattr__(self, "capabilities", tuple(sorted(set(self.capabilities))))

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.suite)

    @property
    def is_unknown(self) -> bool:
        return self.component == UNKNOWN_COMPONENT


@dataclass(frozen=True)
class Regression:
    """A test that had a real owner and now resolves to Unknown."""

    name: str
    suite: str
    previous_component: str


@dataclass(frozen=True)
class VariantOwnership:
    """A job variant (``Name:value``) claimed by a component."""

    variant_name: str
    variant_value: str
    component: str
    jira_project: str
    jira_component: str
    product: str = ""
    api_version: str = VARIANT_OWNERSHIP_API_VERSION
    kind: str = VARIANT_OWNERSHIP_KIND
