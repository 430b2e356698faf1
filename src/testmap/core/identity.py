"""Stable test identity across renames."""

from __future__ import annotations

from testmap.core.models import ComponentRuleSet, TestInfo


def stable_id(test: TestInfo, owner: ComponentRuleSet) -> str:
    """Oldest known name of ``test`` according to its owner's rename table.

    Only the owning component's table is consulted: rename history is scoped
    to the component that recorded it.
    """
    return owner.renames.get(test.name, test.name)
