"""Variant ownership: job variants claimed by components."""

from __future__ import annotations

from testmap.core.models import VariantOwnership
from testmap.core.registry import ComponentRegistry


def identify_variants(registry: ComponentRegistry, *, product: str = "") -> list[VariantOwnership]:
    """One record per ``Name:value`` variant claimed by a registered component.

    Variants are validated and de-conflicted at registration time, so every
    entry here splits cleanly and has exactly one owner.
    """
    records = []
    for rule_set in registry:
        for variant in rule_set.variants:
            name, _, value = variant.partition(":")
            records.append(
                VariantOwnership(
                    variant_name=name,
                    variant_value=value,
                    component=rule_set.name,
                    jira_project=rule_set.jira_project,
                    jira_component=rule_set.default_jira_component,
                    product=product,
                )
            )
    return records
