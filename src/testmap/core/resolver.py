"""
Ownership resolution.

Runs every registered component's matchers against a test and turns the
winning claim into a single ``TestOwnership`` record.

Manifesto:
    Every test gets exactly one owner. A test no rule claims belongs to the
    Unknown sentinel, which is normal steady state and not an error. Two teams
    claiming the same test at the same priority is a configuration error: the
    resolution is still deterministic (first registered wins), but by default
    the run aborts so the conflict is settled in the rule tables.

Architecture:
    ::

        TestInfo ──► for each ComponentRuleSet (registration order)
                       best_match(matchers)  ─► highest priority, first declared on tie
                     │
                     ▼
                     pick component with strictly highest priority
                       tie  ─► AmbiguousOwnershipError (strict) / warn + first registered
                       none ─► UNKNOWN
                     │
                     ▼
                     TestOwnership(id=stable_id, jira, priority,
                                   capabilities = matcher ∪ derived)

Performance:
    O(components × matchers) per test. Tests are independent, so
    ``resolve_all`` fans a batch out over a thread pool; the sealed registry
    is read without locking.

Examples:
    >>> registry = ComponentRegistry([auth, machine_api])
    >>> resolver = OwnershipResolver(registry)
    >>> resolver.resolve(TestInfo(name="[bz-apiserver-auth] pods ready")).component
    'apiserver-auth'

Tags:
    testmap, resolver, ownership, priority, thread-pool
"""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from testmap.core.capabilities import DEFAULT_TAGGER, CapabilityTagger
from testmap.core.errors import AmbiguousOwnershipError
from testmap.core.identity import stable_id
from testmap.core.logging import get_logger, log_step
from testmap.core.matching import best_match
from testmap.core.models import UNKNOWN, ComponentRuleSet, Matcher, TestInfo, TestOwnership
from testmap.core.registry import ComponentRegistry

logger = get_logger(__name__)


class OwnershipResolver:
    """Resolve tests against a sealed component registry.

    Args:
        registry: Registered component rule sets. Sealed on construction.
        strict: Raise ``AmbiguousOwnershipError`` on equal-priority claims by
            different components. When False the first registered claimant
            wins and a warning is logged.
        tagger: Capability heuristics merged into every record.
        product: Product stamped on emitted records.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        *,
        strict: bool = True,
        tagger: CapabilityTagger = DEFAULT_TAGGER,
        product: str = "",
    ):
        self.registry = registry.seal()
        self.strict = strict
        self.tagger = tagger
        self.product = product

    def claims(self, test: TestInfo) -> list[tuple[ComponentRuleSet, Matcher]]:
        """Each component's winning matcher for ``test``, in registration order."""
        found = []
        for rule_set in self.registry:
            matcher = best_match(rule_set.matchers, test)
            if matcher is not None:
                found.append((rule_set, matcher))
        return found

    def resolve(self, test: TestInfo) -> TestOwnership:
        """Produce exactly one ownership record for ``test``."""
        claims = self.claims(test)
        if not claims:
            return self._record(test, UNKNOWN, None)

        top = max(matcher.priority for _, matcher in claims)
        contenders = [(rs, m) for rs, m in claims if m.priority == top]
        if len(contenders) > 1:
            names = [rs.name for rs, _ in contenders]
            if self.strict:
                raise AmbiguousOwnershipError(test.name, test.suite, names, top)
            logger.warning(
                "resolver.ambiguous_match",
                test=test.name,
                suite=test.suite,
                components=names,
                priority=top,
                chosen=names[0],
            )

        owner, matcher = contenders[0]
        return self._record(test, owner, matcher)

    def resolve_all(self, tests: Iterable[TestInfo], max_workers: int = 8) -> list[TestOwnership]:
        """Resolve a batch concurrently, keeping input order.

        Every test is resolved before any error is raised, so all ambiguous
        claims in the batch are logged together; the first one is raised.
        """
        tests = list(tests)
        with log_step("resolver.batch", tests=len(tests), workers=max_workers) as timer:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                futures = [pool.submit(self.resolve, test) for test in tests]

            records: list[TestOwnership] = []
            conflicts: list[AmbiguousOwnershipError] = []
            for future in futures:
                try:
                    records.append(future.result())
                except AmbiguousOwnershipError as e:
                    conflicts.append(e)

            for conflict in conflicts:
                logger.error("resolver.ambiguous_match", **conflict.to_dict())
            if conflicts:
                raise conflicts[0].with_context(conflicts=len(conflicts))

            unknown = sum(1 for r in records if r.is_unknown)
            timer.add_metric("unknown", unknown)
        return records

    def _record(self, test: TestInfo, owner: ComponentRuleSet, matcher: Matcher | None) -> TestOwnership:
        capabilities = set(self.tagger.derive(test))
        jira_component = owner.default_jira_component
        priority = 0
        if matcher is not None:
            capabilities.update(matcher.capabilities)
            jira_component = matcher.jira_component or owner.default_jira_component
            priority = matcher.priority

        return TestOwnership(
            name=test.name,
            suite=test.suite,
            id=stable_id(test, owner),
            component=owner.name,
            jira_component=jira_component,
            jira_project=owner.jira_project,
            priority=priority,
            capabilities=tuple(capabilities),
            product=self.product,
        )


def resolve(test: TestInfo, registry: ComponentRegistry, *, strict: bool = True) -> TestOwnership:
    """Resolve one test against ``registry``."""
    return OwnershipResolver(registry, strict=strict).resolve(test)


def resolve_all(
    tests: Iterable[TestInfo],
    registry: ComponentRegistry,
    *,
    strict: bool = True,
    max_workers: int = 8,
    product: str = "",
) -> list[TestOwnership]:
    """Resolve a batch of tests against ``registry`` on a thread pool."""
    resolver = OwnershipResolver(registry, strict=strict, product=product)
    return resolver.resolve_all(tests, max_workers=max_workers)
