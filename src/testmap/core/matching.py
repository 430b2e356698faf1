"""
Matcher evaluation.

A matcher is checked against the test's identity string: ``<suite>.<name>``
when the test has a suite, otherwise just ``<name>``. Substring checks are
literal and case-sensitive. The suite constraint compares the raw suite
exactly.

All functions here are pure and safe to call from many threads at once.

Examples:
    >>> m = Matcher(include_all=("foo",), include_any=("bar", "baz"))
    >>> evaluate(m, TestInfo(name="foobar"))
    True
    >>> evaluate(m, TestInfo(name="foobam"))
    False
"""

from __future__ import annotations

from collections.abc import Sequence

from testmap.core.models import Matcher, TestInfo


def identity_string(test: TestInfo) -> str:
    """The text matchers search for substrings in."""
    if test.suite:
        return f"{test.suite}.{test.name}"
    return test.name


def evaluate(matcher: Matcher, test: TestInfo) -> bool:
    """Return True when every constraint set on ``matcher`` holds for ``test``."""
    if matcher.suite is not None and matcher.suite != test.suite:
        return False

    identity = identity_string(test)
    if not all(s in identity for s in matcher.include_all):
        return False
    if matcher.include_any and not any(s in identity for s in matcher.include_any):
        return False
    return True


def best_match(matchers: Sequence[Matcher], test: TestInfo) -> Matcher | None:
    """Highest-priority firing matcher; the first declared wins a tie.

    Every matcher is evaluated, the list is never short-circuited on the
    first hit.
    """
    winner: Matcher | None = None
    for matcher in matchers:
        if not evaluate(matcher, test):
            continue
        if winner is None or matcher.priority > winner.priority:
            winner = matcher
    return winner
