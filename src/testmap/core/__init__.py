"""testmap core -- ownership resolution and mapping regression checks.

Manifesto:
    Every CI test result must be attributed to exactly one team. The core
    turns declarative per-team rule tables into ownership records and gates
    regenerated mappings so that no test silently loses its owner.

    ``testmap.core`` is synchronous and I/O-free apart from the snapshot
    codec's file helpers. Resolution is pure per test, so callers may
    parallelize freely once the registry is sealed.

Architecture::

    Layer 1 -- Types, Errors & Ambient
        models.py          TestInfo, Matcher, ComponentRuleSet, TestOwnership, ...
        errors.py          Structured error hierarchy (ConfigError, SnapshotError, ...)
        logging.py         structlog configuration + timing
        settings.py        pydantic-settings configuration (TESTMAP_*)

    Layer 2 -- Resolution
        matching.py        Matcher evaluation (substring + suite constraints)
        capabilities.py    Heuristic capability tagging
        identity.py        Stable test identity from rename tables
        registry.py        ComponentRegistry (registration-time validation)
        resolver.py        OwnershipResolver (priority resolution, batch pool)
        variants.py        Variant ownership records

    Layer 3 -- Snapshots
        snapshot.py        JSON snapshot / test list codec
        verify.py          Mapping regression verifier
"""

from testmap.core.capabilities import DEFAULT_TAGGER, CapabilityTagger, derive_capabilities
from testmap.core.errors import (
    AmbiguousOwnershipError,
    ComponentNotFoundError,
    ComponentSpecError,
    ConfigError,
    DuplicateComponentError,
    ErrorCategory,
    ErrorContext,
    InvalidMatcherError,
    MappingRegressionError,
    RegistrySealedError,
    SnapshotError,
    TestmapError,
)
from testmap.core.identity import stable_id
from testmap.core.matching import best_match, evaluate, identity_string
from testmap.core.models import (
    UNKNOWN,
    UNKNOWN_COMPONENT,
    ComponentRuleSet,
    Matcher,
    Regression,
    TestInfo,
    TestOwnership,
    VariantOwnership,
)
from testmap.core.registry import ComponentRegistry
from testmap.core.resolver import OwnershipResolver, resolve, resolve_all
from testmap.core.variants import identify_variants
from testmap.core.verify import VerificationResult, find_regressions, require_no_regressions, verify

__all__ = [
    # models
    "TestInfo",
    "Matcher",
    "ComponentRuleSet",
    "TestOwnership",
    "Regression",
    "VariantOwnership",
    "UNKNOWN",
    "UNKNOWN_COMPONENT",
    # errors
    "TestmapError",
    "ErrorCategory",
    "ErrorContext",
    "ConfigError",
    "InvalidMatcherError",
    "DuplicateComponentError",
    "AmbiguousOwnershipError",
    "ComponentNotFoundError",
    "RegistrySealedError",
    "ComponentSpecError",
    "SnapshotError",
    "MappingRegressionError",
    # resolution
    "evaluate",
    "best_match",
    "identity_string",
    "stable_id",
    "CapabilityTagger",
    "DEFAULT_TAGGER",
    "derive_capabilities",
    "ComponentRegistry",
    "OwnershipResolver",
    "resolve",
    "resolve_all",
    "identify_variants",
    # verification
    "VerificationResult",
    "verify",
    "find_regressions",
    "require_no_regressions",
]
