"""Component registry.

Rule sets are registered once at process start and validated as they come
in: a matcher without constraints or with a blank include pattern, a
duplicate name, a malformed or contested variant all fail registration.
Once a resolver is built the registry is sealed and becomes read-only, so
concurrent resolution can read it without locking.

Manifesto:
    Configuration errors surface before the first test is resolved, never
    as a per-test failure halfway through a run.

Tags:
    testmap, registry, component-discovery, lookup, validation
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from testmap.core.errors import (
    ComponentNotFoundError,
    ConfigError,
    DuplicateComponentError,
    ErrorContext,
    InvalidMatcherError,
    RegistrySealedError,
)
from testmap.core.logging import get_logger
from testmap.core.models import UNKNOWN, UNKNOWN_COMPONENT, ComponentRuleSet

logger = get_logger(__name__)


class ComponentRegistry:
    """Ordered, name-unique collection of component rule sets.

    Iteration follows registration order, which is also the deterministic
    tie-break order used by the resolver.
    """

    def __init__(self, rule_sets: Iterable[ComponentRuleSet] = ()):
        self._components: dict[str, ComponentRuleSet] = {}
        self._variant_owners: dict[str, str] = {}
        self._sealed = False
        self.register_all(rule_sets)

    def register(self, rule_set: ComponentRuleSet) -> ComponentRuleSet:
        """Validate and add one rule set. Returns it for chaining."""
        if self._sealed:
            raise RegistrySealedError(rule_set.name)

        _validate(rule_set)
        if rule_set.name in self._components:
            raise DuplicateComponentError(rule_set.name)

        for variant in rule_set.variants:
            owner = self._variant_owners.get(variant)
            if owner is not None:
                raise ConfigError(
                    f"Variant {variant!r} is claimed by both {owner!r} and {rule_set.name!r}",
                    context=ErrorContext(component=rule_set.name, metadata={"variant": variant}),
                )

        self._components[rule_set.name] = rule_set
        for variant in rule_set.variants:
            self._variant_owners[variant] = rule_set.name

        logger.debug(
            "registry.component_registered",
            component=rule_set.name,
            matchers=len(rule_set.matchers),
            renames=len(rule_set.renames),
        )
        return rule_set

    def register_all(self, rule_sets: Iterable[ComponentRuleSet]) -> ComponentRegistry:
        for rule_set in rule_sets:
            self.register(rule_set)
        return self

    def seal(self) -> ComponentRegistry:
        """Freeze the registry; further registration raises."""
        if not self._sealed:
            self._sealed = True
            logger.debug("registry.sealed", components=len(self._components))
        return self

    @property
    def sealed(self) -> bool:
        return self._sealed

    def get(self, name: str) -> ComponentRuleSet:
        """Look up a rule set by name. The Unknown sentinel is always available."""
        if name == UNKNOWN_COMPONENT:
            return UNKNOWN
        try:
            return self._components[name]
        except KeyError:
            raise ComponentNotFoundError(name, self.names()) from None

    def names(self) -> list[str]:
        """Registered names in registration order."""
        return list(self._components)

    def __iter__(self) -> Iterator[ComponentRuleSet]:
        return iter(self._components.values())

    def __len__(self) -> int:
        return len(self._components)

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def __repr__(self) -> str:
        state = "sealed" if self._sealed else "open"
        return f"ComponentRegistry({len(self)} components, {state})"


def _validate(rule_set: ComponentRuleSet) -> None:
    if not rule_set.name:
        raise ConfigError("Component name must not be empty")
    if rule_set.name == UNKNOWN_COMPONENT:
        raise ConfigError(
            f"{UNKNOWN_COMPONENT!r} is reserved for unowned tests",
            context=ErrorContext(component=rule_set.name),
        )
    if not rule_set.default_jira_component:
        raise ConfigError(
            f"Component {rule_set.name!r} has no default JIRA component",
            context=ErrorContext(component=rule_set.name),
        )

    for index, matcher in enumerate(rule_set.matchers):
        if not matcher.is_constrained:
            raise InvalidMatcherError(rule_set.name, index)
        if matcher.has_blank_pattern:
            raise InvalidMatcherError(
                rule_set.name,
                index,
                f"Component {rule_set.name!r} matcher #{index} has an empty or whitespace-only "
                "include pattern and would match every test",
            )

    for variant in rule_set.variants:
        key, sep, value = variant.partition(":")
        if not (sep and key and value):
            raise ConfigError(
                f"Component {rule_set.name!r} variant {variant!r} is not of the form Name:value",
                context=ErrorContext(component=rule_set.name, metadata={"variant": variant}),
            )
