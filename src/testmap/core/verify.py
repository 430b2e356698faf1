"""
Mapping regression verification.

Compares a previously published snapshot with a newly generated one and
flags every test that had a real owner before and resolves to Unknown now.
This is a hard gate: attribution dashboards break when ownership silently
disappears.

Only ownership *loss* is checked:
    - a test absent from the old snapshot that is Unknown now is a new test,
      not a regression
    - a test that moves between two real owners is a reassignment, allowed

Tests are correlated by (name, suite). When the old snapshot lists the same
key more than once, the last entry wins.

Architecture:
    ::

        old records ──► index {(name, suite): component}
                                  │
        new records ──► Unknown? ─┴─► old owner real? ──► Regression
                                                            │
                                     all collected, then ◄──┘
                                     VerificationResult(ok = no regressions)

Examples:
    >>> result = verify(old, new)
    >>> result.ok
    False
    >>> result.regressions[0]
    Regression(name='t1', suite='s1', previous_component='auth')

Tags:
    testmap, verification, quality-gate, regression
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from testmap.core.errors import MappingRegressionError
from testmap.core.logging import get_logger, log_step
from testmap.core.models import UNKNOWN_COMPONENT, Regression, TestOwnership

logger = get_logger(__name__)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of one verification run."""

    regressions: tuple[Regression, ...] = field(default_factory=tuple)
    checked: int = 0

    @property
    def ok(self) -> bool:
        return not self.regressions

    def raise_for_regressions(self) -> None:
        """Raise ``MappingRegressionError`` carrying every regression found."""
        if self.regressions:
            raise MappingRegressionError(list(self.regressions))


def find_regressions(
    old_records: Iterable[TestOwnership],
    new_records: Iterable[TestOwnership],
) -> list[Regression]:
    """Every (name, suite) that moved from a real owner to Unknown, in new-snapshot order."""
    previous = {(r.name, r.suite): r.component for r in old_records}

    regressions = []
    for record in new_records:
        if record.component != UNKNOWN_COMPONENT:
            continue
        owner = previous.get((record.name, record.suite))
        if owner is not None and owner != UNKNOWN_COMPONENT:
            regressions.append(Regression(record.name, record.suite, owner))
    return regressions


def verify(
    old_records: Iterable[TestOwnership],
    new_records: Iterable[TestOwnership],
) -> VerificationResult:
    """Check ``new_records`` against ``old_records`` and report every regression.

    Each regression is logged individually; the result is only failed once
    the whole snapshot has been scanned.
    """
    old_records = list(old_records)
    new_records = list(new_records)

    with log_step("verify.scan", reference=len(old_records), candidate=len(new_records)) as timer:
        regressions = find_regressions(old_records, new_records)
        timer.add_metric("regressions", len(regressions))

    for regression in regressions:
        logger.warning(
            "verify.regression",
            name=regression.name,
            suite=regression.suite,
            message=f'test moved from "{regression.previous_component}" to "{UNKNOWN_COMPONENT}"',
        )

    return VerificationResult(regressions=tuple(regressions), checked=len(new_records))


def require_no_regressions(
    old_records: Iterable[TestOwnership],
    new_records: Iterable[TestOwnership],
) -> VerificationResult:
    """Like ``verify`` but raises ``MappingRegressionError`` when any regression exists."""
    result = verify(old_records, new_records)
    result.raise_for_regressions()
    return result
