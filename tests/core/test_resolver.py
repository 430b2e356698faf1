"""Tests for testmap.core.resolver — ownership resolution."""

from __future__ import annotations

import pytest

from testmap.core.errors import AmbiguousOwnershipError
from testmap.core.models import UNKNOWN_COMPONENT, ComponentRuleSet, Matcher, TestInfo
from testmap.core.registry import ComponentRegistry
from testmap.core.resolver import OwnershipResolver, resolve, resolve_all


@pytest.fixture()
def contested_registry() -> ComponentRegistry:
    """Two components claiming '[sig-storage]' tests."""
    storage = ComponentRuleSet(
        name="Storage",
        default_jira_component="Storage",
        matchers=(Matcher(include_any=("[sig-storage]",), priority=1),),
    )
    csi = ComponentRuleSet(
        name="Storage / CSI",
        default_jira_component="Storage / CSI",
        matchers=(
            Matcher(include_any=("[sig-storage]",), priority=1),
            Matcher(include_all=("[sig-storage]", "csi"), priority=2, jira_component="Storage / CSI Drivers"),
        ),
    )
    return ComponentRegistry([storage, csi])


# ── Basic resolution ─────────────────────────────────────────────────────


class TestResolve:
    def test_single_claim(self, registry):
        record = resolve(TestInfo(name="[bz-apiserver-auth] pods ready"), registry)
        assert record.component == "apiserver-auth"
        assert record.jira_component == "apiserver-auth"
        assert record.jira_project == "OCPBUGS"
        assert record.priority == 0

    def test_higher_priority_component_wins(self, auth_component):
        machine = ComponentRuleSet(
            name="Machine Config",
            default_jira_component="Machine Config",
            matchers=(Matcher(include_any=("upgrade",), priority=2),),
        )
        reg = ComponentRegistry([machine, auth_component])
        record = resolve(TestInfo(name="Author:x :Authentication upgrade works"), reg)
        assert record.component == "apiserver-auth"
        assert record.priority == 3

    def test_no_claim_is_unknown(self, registry):
        record = resolve(TestInfo(name="[sig-network] services work", suite="openshift-tests"), registry)
        assert record.component == UNKNOWN_COMPONENT
        assert record.jira_component == UNKNOWN_COMPONENT
        assert record.is_unknown
        assert record.priority == 0
        assert record.id == "[sig-network] services work"

    def test_suite_matcher(self, registry):
        record = resolve(TestInfo(name="scale up", suite="Machine features testing"), registry)
        assert record.component == "Cloud Compute / Machine API Providers"

    def test_matcher_jira_override(self, contested_registry):
        record = resolve(TestInfo(name="[sig-storage] csi mounts"), contested_registry)
        assert record.component == "Storage / CSI"
        assert record.jira_component == "Storage / CSI Drivers"
        assert record.priority == 2

    def test_record_keeps_name_and_suite(self, registry):
        record = resolve(TestInfo(name="[bz-apiserver-auth] x", suite="s1"), registry)
        assert record.key == ("[bz-apiserver-auth] x", "s1")

    def test_stable_id_uses_rename_table(self, auth_component):
        renamed = ComponentRuleSet(
            name=auth_component.name,
            default_jira_component=auth_component.default_jira_component,
            matchers=(Matcher(include_any=("apiserver-auth",)),),
            renames=auth_component.renames,
        )
        record = resolve(TestInfo(name="[apiserver-auth] pods ready"), ComponentRegistry([renamed]))
        assert record.id == "[bz-apiserver-auth] pods ready"

    def test_capabilities_union_of_matcher_and_tagger(self):
        rule_set = ComponentRuleSet(
            name="Networking",
            default_jira_component="Networking",
            matchers=(Matcher(include_any=("[sig-network]",), capabilities=("Routes",)),),
        )
        record = resolve(
            TestInfo(name="[sig-network][Feature:Router] routes [Serial]"),
            ComponentRegistry([rule_set]),
        )
        assert record.capabilities == ("Router", "Routes", "Serial")

    def test_product_stamped(self, registry):
        resolver = OwnershipResolver(registry, product="OCP")
        assert resolver.resolve(TestInfo(name="[bz-apiserver-auth] x")).product == "OCP"

    def test_resolver_seals_registry(self, registry):
        OwnershipResolver(registry)
        assert registry.sealed

    def test_deterministic(self, registry):
        test = TestInfo(name="Author:x :Authentication: login", suite="s")
        assert resolve(test, registry) == resolve(test, registry)


# ── Ambiguity ────────────────────────────────────────────────────────────


class TestAmbiguity:
    def test_equal_priority_strict_raises(self, contested_registry):
        with pytest.raises(AmbiguousOwnershipError) as exc_info:
            resolve(TestInfo(name="[sig-storage] pv binds"), contested_registry)
        err = exc_info.value
        assert err.components == ["Storage", "Storage / CSI"]
        assert err.priority == 1
        assert err.context.test_name == "[sig-storage] pv binds"

    def test_equal_priority_lenient_picks_first_registered(self, contested_registry):
        record = resolve(TestInfo(name="[sig-storage] pv binds"), contested_registry, strict=False)
        assert record.component == "Storage"

    def test_higher_priority_settles_contest(self, contested_registry):
        record = resolve(TestInfo(name="[sig-storage] csi driver"), contested_registry)
        assert record.component == "Storage / CSI"

    def test_same_component_tie_is_not_ambiguous(self):
        rule_set = ComponentRuleSet(
            name="Etcd",
            default_jira_component="Etcd",
            matchers=(
                Matcher(include_any=("etcd",), priority=1, jira_component="Etcd A"),
                Matcher(include_any=("quorum",), priority=1, jira_component="Etcd B"),
            ),
        )
        record = resolve(TestInfo(name="etcd quorum guard"), ComponentRegistry([rule_set]))
        assert record.jira_component == "Etcd A"


# ── Batch resolution ─────────────────────────────────────────────────────


class TestResolveAll:
    def test_preserves_input_order(self, registry):
        tests = [
            TestInfo(name=f"[bz-apiserver-auth] t{i}") if i % 2 else TestInfo(name=f"other t{i}")
            for i in range(50)
        ]
        records = resolve_all(tests, registry, max_workers=4)
        assert [r.name for r in records] == [t.name for t in tests]
        assert sum(r.is_unknown for r in records) == 25

    def test_matches_sequential(self, registry):
        tests = [
            TestInfo(name="[bz-apiserver-auth] a"),
            TestInfo(name="scale", suite="Machine features testing"),
            TestInfo(name="unclaimed"),
        ]
        resolver = OwnershipResolver(registry)
        assert resolver.resolve_all(tests, max_workers=3) == [resolver.resolve(t) for t in tests]

    def test_ambiguity_raises_with_conflict_count(self, contested_registry):
        tests = [
            TestInfo(name="[sig-storage] a"),
            TestInfo(name="[sig-storage] csi b"),
            TestInfo(name="[sig-storage] c"),
        ]
        with pytest.raises(AmbiguousOwnershipError) as exc_info:
            resolve_all(tests, contested_registry)
        assert exc_info.value.test_name == "[sig-storage] a"
        assert exc_info.value.context.metadata["conflicts"] == 2

    def test_lenient_batch(self, contested_registry):
        records = resolve_all([TestInfo(name="[sig-storage] a")], contested_registry, strict=False)
        assert records[0].component == "Storage"

    def test_empty_batch(self, registry):
        assert resolve_all([], registry) == []
