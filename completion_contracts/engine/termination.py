"""
Termination law.

SUCCESS iff the failing-MUST set is empty, checked before anything else.
Otherwise the run fails once a resource is exhausted or the failing-MUST set
has stopped shrinking for a full stagnation window. Quality scores never
decide termination.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..contract.enums import RunReason, RunStatus, Severity, ValidationStatus
from ..contract.primitives import ResourceConstraints
from ..contract.results import ValidationResult


@dataclass(frozen=True)
class Budget:
    """Effective run limits after applying configured defaults."""
    max_iterations: int
    stagnation_window: int
    max_time_ms: Optional[int] = None
    max_cost_usd: Optional[float] = None

    @classmethod
    def from_constraints(
        cls,
        constraints: ResourceConstraints,
        default_max_iterations: Optional[int] = None,
        default_stagnation_window: Optional[int] = None,
    ) -> "Budget":
        if default_max_iterations is None or default_stagnation_window is None:
            from ..config import settings

            if default_max_iterations is None:
                default_max_iterations = settings.default_max_iterations
            if default_stagnation_window is None:
                default_stagnation_window = settings.default_stagnation_window

        window = constraints.stagnation_window or default_stagnation_window
        if window < 2:
            raise ValueError(f"stagnation window must be at least 2, got {window}")

        return cls(
            max_iterations=constraints.max_iterations or default_max_iterations,
            stagnation_window=window,
            max_time_ms=constraints.max_time_ms,
            max_cost_usd=constraints.max_cost_usd,
        )


@dataclass
class Partition:
    """Criterion ids of one pass grouped by outcome."""
    failing_must: List[str] = field(default_factory=list)
    failing_should: List[str] = field(default_factory=list)
    failing_may: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    skipped_must: List[str] = field(default_factory=list)


def partition(results: Sequence[ValidationResult]) -> Partition:
    parts = Partition()
    for result in results:
        if result.status == ValidationStatus.FAIL:
            if result.severity == Severity.MUST:
                parts.failing_must.append(result.ac_id)
            elif result.severity == Severity.SHOULD:
                parts.failing_should.append(result.ac_id)
            else:
                parts.failing_may.append(result.ac_id)
        elif result.status == ValidationStatus.SKIP:
            parts.skipped.append(result.ac_id)
            if result.severity == Severity.MUST:
                parts.skipped_must.append(result.ac_id)
    return parts


def made_progress(previous: Sequence[str], current: Sequence[str]) -> bool:
    """True if the failing set shrank by count or any criterion left it."""
    return len(current) < len(previous) or bool(set(previous) - set(current))


def is_stagnant(failing_sets: Sequence[Sequence[str]], window: int) -> bool:
    """True if the last ``window`` failing-MUST sets show no progress at all.

    ``failing_sets`` is ordered oldest first and includes the current pass.
    """
    if window < 2 or len(failing_sets) < window:
        return False
    recent = failing_sets[-window:]
    return not any(made_progress(a, b) for a, b in zip(recent, recent[1:]))


def exhausted_resource(
    iteration: int, elapsed_ms: int, cost_usd: float, budget: Budget
) -> Optional[RunReason]:
    if iteration >= budget.max_iterations:
        return RunReason.MAX_PASSES
    if budget.max_time_ms is not None and elapsed_ms >= budget.max_time_ms:
        return RunReason.MAX_TIME
    if budget.max_cost_usd is not None and cost_usd >= budget.max_cost_usd:
        return RunReason.MAX_COST
    return None


def decide(
    failing_must: Sequence[str],
    iteration: int,
    elapsed_ms: int,
    cost_usd: float,
    budget: Budget,
    stagnant: bool,
) -> Optional[Tuple[RunStatus, RunReason]]:
    """Apply the termination law to one pass. None means keep refining."""
    if not failing_must:
        return RunStatus.SUCCESS, RunReason.CRITERIA_SATISFIED
    exhausted = exhausted_resource(iteration, elapsed_ms, cost_usd, budget)
    if exhausted is not None:
        return RunStatus.FAILURE, exhausted
    if stagnant:
        return RunStatus.FAILURE, RunReason.STAGNANT
    return None


def aggregate_quality_score(results: Sequence[ValidationResult]) -> Optional[float]:
    """Mean of numeric ``score`` details. Informational only."""
    scores = [
        float(r.details["score"])
        for r in results
        if isinstance(r.details.get("score"), (int, float))
        and not isinstance(r.details.get("score"), bool)
    ]
    if not scores:
        return None
    return sum(scores) / len(scores)
