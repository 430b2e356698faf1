"""
Structured error types for testmap.

Provides a small hierarchy of typed errors carrying a category, structured
context, and an optional chained cause, so that configuration problems and
verification failures are reported with everything needed to fix them
(component names, test identity, file path).

Manifesto:
    - **Typed Error Hierarchy:** Configuration, snapshot and verification
      failures are distinct types
    - **Fatal by construction:** Nothing in this module is retryable; a bad
      rule table or an unreadable snapshot must be fixed, not retried
    - **Rich Context:** Errors carry the component/test that caused them
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                       TestmapError                           │
        │              (category, context, cause)                      │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ConfigError            SnapshotError     MappingRegression  │
        │  (CONFIG)               (PARSE)           Error              │
        │       │                                   (VERIFICATION)     │
        │  InvalidMatcherError                                         │
        │  DuplicateComponentError                                     │
        │  AmbiguousOwnershipError                                     │
        │  ComponentNotFoundError                                      │
        │  RegistrySealedError                                         │
        │  ComponentSpecError                                          │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidMatcherError("apiserver-auth", 1)
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>
    >>> error.context.component
    'apiserver-auth'

    Adding context fluently:

    >>> error = SnapshotError("not a JSON array").with_context(path="mapping.json")
    >>> error.context.path
    'mapping.json'

Guardrails:
    ❌ DON'T: Raise for a test that matches no rule - that is "Unknown"
    ✅ DO: Raise ConfigError subclasses before any resolution happens

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, error-context, testmap
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from testmap.core.models import Regression


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and reporting.

    Attributes:
        CONFIG: Invalid component rule tables or settings
        PARSE: Malformed snapshot or test list input
        SOURCE: Input files that cannot be read
        VERIFICATION: Mapping regressions detected by the verifier
        INTERNAL: Bugs, unexpected state
    """

    CONFIG = "CONFIG"
    PARSE = "PARSE"
    SOURCE = "SOURCE"
    VERIFICATION = "VERIFICATION"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Attributes:
        component: Component rule set involved
        test_name: Name of the test being resolved
        suite: Suite of the test being resolved
        path: File the error was read from
        metadata: Additional key-value pairs
    """

    component: str | None = None
    test_name: str | None = None
    suite: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["component", "test_name", "suite", "path"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class TestmapError(Exception):
    """
    Base exception for all testmap errors.

    Subclasses set ``default_category`` to classify themselves; callers may
    still override it per instance.
    """

    __test__ = False  # keep pytest from collecting this as a test class

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> TestmapError:
        """
        Add context to this error (fluent API).

        Usage:
            raise SnapshotError("Failed").with_context(path="mapping.json")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(TestmapError):
    """
    Configuration error.

    Raised at registration time, before any test is resolved. The run must
    abort; partially-correct ownership data is never produced.
    """

    default_category = ErrorCategory.CONFIG


class InvalidMatcherError(ConfigError):
    """A matcher with no include_all, include_any or suite constraint."""

    def __init__(self, component: str, index: int, message: str | None = None):
        self.component = component
        self.index = index
        super().__init__(
            message
            or f"Component {component!r} matcher #{index} has no include_all, "
            "include_any or suite constraint and would match every test",
            context=ErrorContext(component=component, metadata={"matcher_index": index}),
        )


class DuplicateComponentError(ConfigError):
    """Two rule sets registered under the same name."""

    def __init__(self, component: str):
        self.component = component
        super().__init__(
            f"Component {component!r} is already registered",
            context=ErrorContext(component=component),
        )


class AmbiguousOwnershipError(ConfigError):
    """Two or more components claim a test at the same highest priority."""

    def __init__(self, test_name: str, suite: str, components: list[str], priority: int):
        self.test_name = test_name
        self.suite = suite
        self.components = list(components)
        self.priority = priority
        super().__init__(
            f"Test {test_name!r} (suite {suite!r}) is claimed by {', '.join(components)} "
            f"at priority {priority}; raise one matcher's priority to settle ownership",
            context=ErrorContext(
                test_name=test_name,
                suite=suite,
                metadata={"components": list(components), "priority": priority},
            ),
        )


class ComponentNotFoundError(ConfigError):
    """Component not found in registry."""

    def __init__(self, component: str, available: list[str] | None = None):
        self.component = component
        message = f"Component not found: {component}"
        if available:
            message += f". Available: {', '.join(available)}"
        super().__init__(message, context=ErrorContext(component=component))


class RegistrySealedError(ConfigError):
    """Registration attempted after resolution started."""

    def __init__(self, component: str):
        self.component = component
        super().__init__(
            f"Cannot register {component!r}: registry is sealed",
            context=ErrorContext(component=component),
        )


class ComponentSpecError(ConfigError):
    """A declarative component file could not be parsed or validated."""

    def __init__(self, message: str, *, path: str | None = None, cause: Exception | None = None):
        super().__init__(message, context=ErrorContext(path=path), cause=cause)


# =============================================================================
# INPUT / VERIFICATION ERRORS
# =============================================================================


class SnapshotError(TestmapError):
    """Snapshot or test list input could not be parsed. Always fatal."""

    default_category = ErrorCategory.PARSE


class MappingRegressionError(TestmapError):
    """One or more tests moved from a real owner to Unknown."""

    default_category = ErrorCategory.VERIFICATION

    def __init__(self, regressions: list[Regression]):
        self.regressions = list(regressions)
        super().__init__(
            f"{len(self.regressions)} test(s) moved to Unknown. "
            "Components are not allowed to move to Unknown; please assign correct ownership.",
            context=ErrorContext(metadata={"regressions": len(self.regressions)}),
        )
