"""Tests for testmap.core.verify — the mapping regression gate."""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from testmap.core.errors import ErrorCategory, MappingRegressionError
from testmap.core.models import Regression
from testmap.core.verify import VerificationResult, find_regressions, require_no_regressions, verify


class TestFindRegressions:
    def test_owned_to_unknown_is_regression(self, make_record):
        old = [make_record("t1", "s1", "auth")]
        new = [make_record("t1", "s1", "Unknown")]
        assert find_regressions(old, new) == [Regression("t1", "s1", "auth")]

    def test_new_unknown_test_is_not_regression(self, make_record):
        old = [make_record("t1", "s1", "auth")]
        new = [make_record("t1", "s1", "auth"), make_record("t2", "s1", "Unknown")]
        assert find_regressions(old, new) == []

    def test_reassignment_is_allowed(self, make_record):
        old = [make_record("t1", "s1", "auth")]
        new = [make_record("t1", "s1", "Networking")]
        assert find_regressions(old, new) == []

    def test_unknown_stays_unknown(self, make_record):
        old = [make_record("t1", "s1", "Unknown")]
        new = [make_record("t1", "s1", "Unknown")]
        assert find_regressions(old, new) == []

    def test_removed_test_is_not_regression(self, make_record):
        old = [make_record("t1", "s1", "auth"), make_record("t2", "s1", "auth")]
        new = [make_record("t1", "s1", "auth")]
        assert find_regressions(old, new) == []

    def test_correlates_on_name_and_suite(self, make_record):
        old = [make_record("t1", "s1", "auth")]
        new = [make_record("t1", "s2", "Unknown")]
        assert find_regressions(old, new) == []

    def test_last_old_duplicate_wins(self, make_record):
        old = [make_record("t1", "s1", "auth"), make_record("t1", "s1", "Unknown")]
        new = [make_record("t1", "s1", "Unknown")]
        assert find_regressions(old, new) == []

    def test_every_regression_reported_in_new_order(self, make_record):
        old = [make_record("a", "s", "auth"), make_record("b", "s", "etcd"), make_record("c", "s", "auth")]
        new = [make_record("c", "s", "Unknown"), make_record("b", "s", "etcd"), make_record("a", "s", "Unknown")]
        assert find_regressions(old, new) == [
            Regression("c", "s", "auth"),
            Regression("a", "s", "auth"),
        ]


class TestVerify:
    def test_identical_snapshots_pass(self, make_record):
        records = [make_record("t1", "s1", "auth"), make_record("t2", "s1", "Unknown")]
        result = verify(records, records)
        assert result.ok
        assert result.checked == 2

    def test_regression_fails(self, make_record):
        result = verify([make_record("t1", "s1", "auth")], [make_record("t1", "s1", "Unknown")])
        assert not result.ok
        assert result.regressions == (Regression("t1", "s1", "auth"),)

    def test_adding_owners_never_adds_regressions(self, make_record):
        old = [make_record("t1", "s", "auth"), make_record("t2", "s", "auth")]
        worse = [make_record("t1", "s", "Unknown"), make_record("t2", "s", "Unknown")]
        better = [make_record("t1", "s", "auth"), make_record("t2", "s", "Unknown")]
        assert len(verify(old, better).regressions) < len(verify(old, worse).regressions)

    def test_accepts_generators(self, make_record):
        old = (r for r in [make_record("t1", "s1", "auth")])
        new = (r for r in [make_record("t1", "s1", "Unknown")])
        assert len(verify(old, new).regressions) == 1

    def test_logs_each_regression(self, make_record):
        with capture_logs() as logs:
            verify(
                [make_record("t1", "s1", "auth"), make_record("t2", "s1", "etcd")],
                [make_record("t1", "s1", "Unknown"), make_record("t2", "s1", "Unknown")],
            )
        events = [e for e in logs if e["event"] == "verify.regression"]
        assert [e["name"] for e in events] == ["t1", "t2"]
        assert events[0]["message"] == 'test moved from "auth" to "Unknown"'
        assert events[0]["log_level"] == "warning"


class TestRaising:
    def test_raise_for_regressions(self, make_record):
        result = VerificationResult(regressions=(Regression("t1", "s1", "auth"),), checked=1)
        with pytest.raises(MappingRegressionError) as exc_info:
            result.raise_for_regressions()
        err = exc_info.value
        assert err.category == ErrorCategory.VERIFICATION
        assert err.regressions == [Regression("t1", "s1", "auth")]
        assert "not allowed to move to Unknown" in err.message

    def test_require_no_regressions_passes(self, make_record):
        records = [make_record("t1", "s1", "auth")]
        assert require_no_regressions(records, records).ok

    def test_require_no_regressions_raises(self, make_record):
        with pytest.raises(MappingRegressionError):
            require_no_regressions([make_record("t1", "s1", "auth")], [make_record("t1", "s1", "Unknown")])
