"""Unit tests for the termination law and run history."""

import pytest

from completion_contracts.contract import (
    IterationSnapshot,
    ResourceConstraints,
    RunReason,
    RunStatus,
    Severity,
    ValidationResult,
    ValidationStatus,
)
from completion_contracts.engine import (
    Budget,
    RunHistory,
    aggregate_quality_score,
    decide,
    exhausted_resource,
    is_stagnant,
    made_progress,
    partition,
)


def result(ac_id, status, severity="must", **details) -> ValidationResult:
    return ValidationResult(
        ac_id=ac_id,
        status=ValidationStatus(status),
        severity=Severity(severity),
        details=details,
    )


BUDGET = Budget(max_iterations=5, stagnation_window=3, max_time_ms=1000, max_cost_usd=2.0)


class TestBudget:
    """Tests for deriving the effective run budget."""

    def test_contract_limits_win(self):
        budget = Budget.from_constraints(
            ResourceConstraints(max_iterations=2, stagnation_window=4, max_cost_usd=1.5),
            default_max_iterations=10,
            default_stagnation_window=3,
        )
        assert budget == Budget(
            max_iterations=2, stagnation_window=4, max_time_ms=None, max_cost_usd=1.5
        )

    def test_defaults_apply_when_unset(self):
        budget = Budget.from_constraints(ResourceConstraints(), 7, 5)
        assert budget.max_iterations == 7
        assert budget.stagnation_window == 5

    def test_defaults_from_settings(self):
        budget = Budget.from_constraints(ResourceConstraints())
        assert budget.max_iterations >= 1
        assert budget.stagnation_window >= 2

    def test_window_below_two_rejected(self):
        with pytest.raises(ValueError):
            Budget.from_constraints(ResourceConstraints(), 5, 1)


class TestPartition:
    """Tests for grouping results by outcome."""

    def test_groups_by_status_and_severity(self):
        parts = partition([
            result("M-PASS", "pass"),
            result("M-FAIL", "fail"),
            result("S-FAIL", "fail", "should"),
            result("Y-FAIL", "fail", "may"),
            result("M-SKIP", "skip"),
            result("S-SKIP", "skip", "should"),
        ])
        assert parts.failing_must == ["M-FAIL"]
        assert parts.failing_should == ["S-FAIL"]
        assert parts.failing_may == ["Y-FAIL"]
        assert parts.skipped == ["M-SKIP", "S-SKIP"]
        assert parts.skipped_must == ["M-SKIP"]


class TestStagnation:
    """Tests for progress and stagnation detection."""

    def test_shrinking_set_is_progress(self):
        assert made_progress(["A", "B"], ["B"])

    def test_swapped_member_is_progress(self):
        assert made_progress(["A"], ["B"])

    def test_same_set_is_not_progress(self):
        assert not made_progress(["A", "B"], ["B", "A"])

    def test_growth_without_departure_is_not_progress(self):
        assert not made_progress(["A"], ["A", "B"])

    def test_needs_full_window(self):
        assert not is_stagnant([["A"], ["A"]], 3)

    def test_flat_window_is_stagnant(self):
        assert is_stagnant([["A", "B"], ["B"], ["B"], ["B"]], 3)

    def test_progress_inside_window_is_not_stagnant(self):
        assert not is_stagnant([["A", "B"], ["B"], ["B"]], 3)

    def test_only_recent_window_counts(self):
        assert is_stagnant([["A", "B", "C"], ["A"], ["A"]], 2)


class TestDecide:
    """Tests for the order of termination rules."""

    def test_success_when_no_failing_must(self):
        assert decide([], 99, 99999, 99.0, BUDGET, True) == (
            RunStatus.SUCCESS,
            RunReason.CRITERIA_SATISFIED,
        )

    def test_max_passes(self):
        assert decide(["A"], 5, 0, 0.0, BUDGET, False) == (
            RunStatus.FAILURE,
            RunReason.MAX_PASSES,
        )

    def test_max_time(self):
        assert exhausted_resource(1, 1000, 0.0, BUDGET) == RunReason.MAX_TIME

    def test_max_cost(self):
        assert exhausted_resource(1, 0, 2.0, BUDGET) == RunReason.MAX_COST

    def test_exhaustion_checked_before_stagnation(self):
        assert decide(["A"], 5, 0, 0.0, BUDGET, True)[1] == RunReason.MAX_PASSES

    def test_stagnant(self):
        assert decide(["A"], 2, 0, 0.0, BUDGET, True) == (
            RunStatus.FAILURE,
            RunReason.STAGNANT,
        )

    def test_keep_going(self):
        assert decide(["A"], 2, 0, 0.0, BUDGET, False) is None

    def test_unset_limits_never_exhaust(self):
        budget = Budget(max_iterations=100, stagnation_window=3)
        assert exhausted_resource(1, 10**9, 10**6, budget) is None


class TestQualityScore:
    """Tests for the informational quality score."""

    def test_mean_of_numeric_scores(self):
        score = aggregate_quality_score([
            result("A", "pass", score=4),
            result("B", "fail", score=2.0),
            result("C", "pass"),
            result("D", "pass", score=True),
        ])
        assert score == 3.0

    def test_none_without_scores(self):
        assert aggregate_quality_score([result("A", "pass")]) is None


class TestRunHistory:
    """Tests for the append-only run history."""

    def test_appends_in_sequence(self):
        history = RunHistory()
        history.append(IterationSnapshot(iteration=1, failing_must=["A"]))
        history.append(IterationSnapshot(iteration=2))
        assert len(history) == 2
        assert history.latest.iteration == 2
        assert history.failing_must_sets() == [["A"], []]
        assert [s.iteration for s in history] == [1, 2]

    def test_rejects_out_of_order_iteration(self):
        history = RunHistory()
        with pytest.raises(ValueError):
            history.append(IterationSnapshot(iteration=2))

    def test_latest_empty(self):
        assert RunHistory().latest is None
