"""
Convergence Engine - the refine-and-recheck loop.

Flow per iteration:
1. Evaluate: dispatch every criterion (bounded parallelism, whole batch)
2. Record: partition results and append the iteration snapshot
3. Decide: success, then resource exhaustion, then stagnation
4. Refine: hand the failing lists to the refiner (if any)
5. Cancel: honor a stop request before starting the next iteration

States: RUNNING -> SUCCESS | FAILURE. Iterations are strictly sequential.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

import structlog

from ..contract.document import CompletionContract
from ..contract.enums import RunReason, RunStatus
from ..contract.primitives import utc_now
from ..contract.results import IterationSnapshot, RunVerdict, ValidationResult
from ..runtime.context import ExecutionContext
from ..validators.dispatch import dispatch_all
from ..validators.registry import ValidatorRegistry
from .history import RunHistory
from .termination import (
    Budget,
    Partition,
    aggregate_quality_score,
    decide,
    is_stagnant,
    partition,
)

logger = structlog.get_logger()


@dataclass
class RefinementRequest:
    """What the refiner receives after a non-terminal iteration."""
    run_id: str
    contract: CompletionContract
    iteration: int
    failing_must: List[str]
    failing_should: List[str]
    results: List[ValidationResult]
    history: Tuple[IterationSnapshot, ...] = field(default_factory=tuple)


@dataclass
class RefinementReport:
    """Optional feedback from the refiner."""
    cost_usd: float = 0.0
    notes: str = ""


Refiner = Callable[[RefinementRequest], Optional[RefinementReport]]


class ConvergenceEngine:
    """Drives a normalized contract to a SUCCESS or FAILURE verdict."""

    def __init__(
        self,
        registry: ValidatorRegistry,
        refiner: Optional[Refiner] = None,
        max_workers: Optional[int] = None,
        default_max_iterations: Optional[int] = None,
        default_stagnation_window: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the engine.

        Args:
            registry: Validators used for dispatch
            refiner: External refinement step called between iterations
            max_workers: Parallel validators per iteration (default from config)
            default_max_iterations: Used when the contract sets none (default from config)
            default_stagnation_window: Used when the contract sets none (default from config)
            clock: Monotonic clock in seconds
        """
        if max_workers is None:
            from ..config import settings

            max_workers = settings.max_parallel_validators

        self.registry = registry
        self.refiner = refiner
        self.max_workers = max_workers
        self.default_max_iterations = default_max_iterations
        self.default_stagnation_window = default_stagnation_window
        self.clock = clock
        self._cancel = threading.Event()

    def stop(self) -> None:
        """Request cancellation; honored at the next iteration boundary."""
        self._cancel.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def evaluate(
        self, contract: CompletionContract, context: ExecutionContext
    ) -> List[ValidationResult]:
        """One full evaluation pass over every criterion."""
        return dispatch_all(contract, context, self.registry, self.max_workers)

    def run(
        self, contract: CompletionContract, context: ExecutionContext
    ) -> RunVerdict:
        """Iterate until the termination law yields a verdict.

        Args:
            contract: Normalized contract (output of the integrity pass)
            context: Execution context shared with validators and the refiner

        Returns:
            RunVerdict with status, reason and the full iteration history
        """
        budget = Budget.from_constraints(
            contract.resource_constraints,
            self.default_max_iterations,
            self.default_stagnation_window,
        )
        run_logger = logger.bind(run_id=context.run_id, contract_id=contract.id)
        run_logger.info(
            "run_started",
            criteria=len(contract.acceptance),
            max_iterations=budget.max_iterations,
            stagnation_window=budget.stagnation_window,
        )

        history = RunHistory()
        started = self.clock()
        started_at = utc_now().isoformat()
        cost_usd = 0.0
        iteration = 0

        while True:
            iteration += 1
            results = self.evaluate(contract, context)
            parts = partition(results)
            elapsed_ms = int((self.clock() - started) * 1000)
            stagnant = is_stagnant(
                history.failing_must_sets() + [parts.failing_must],
                budget.stagnation_window,
            )
            snapshot = IterationSnapshot(
                iteration=iteration,
                quality_score=aggregate_quality_score(results),
                failing_must=parts.failing_must,
                failing_should=parts.failing_should,
                skipped=parts.skipped,
                stagnant=stagnant,
                elapsed_ms=elapsed_ms,
                cost_usd=cost_usd,
            )
            history.append(snapshot)
            run_logger.info(
                "iteration_evaluated",
                iteration=iteration,
                failing_must=parts.failing_must,
                failing_should=len(parts.failing_should),
                skipped=len(parts.skipped),
                quality_score=snapshot.quality_score,
                stagnant=stagnant,
            )

            decision = decide(
                parts.failing_must, iteration, elapsed_ms, cost_usd, budget, stagnant
            )
            if decision is not None:
                status, reason = decision
                return self._verdict(
                    run_logger, context, contract, status, reason,
                    parts, results, history, cost_usd, started, started_at,
                )

            if self.refiner is not None:
                report = self.refiner(RefinementRequest(
                    run_id=context.run_id,
                    contract=contract,
                    iteration=iteration,
                    failing_must=list(parts.failing_must),
                    failing_should=list(parts.failing_should),
                    results=list(results),
                    history=history.snapshots,
                ))
                if report is not None:
                    cost_usd += report.cost_usd
                    run_logger.info(
                        "refinement_applied",
                        iteration=iteration,
                        cost_usd=report.cost_usd,
                        notes=report.notes,
                    )

            if self.cancelled:
                return self._verdict(
                    run_logger, context, contract, RunStatus.FAILURE,
                    RunReason.CANCELLED, parts, results, history, cost_usd,
                    started, started_at,
                )

    def _verdict(
        self,
        run_logger,
        context: ExecutionContext,
        contract: CompletionContract,
        status: RunStatus,
        reason: RunReason,
        parts: Partition,
        results: List[ValidationResult],
        history: RunHistory,
        cost_usd: float,
        started: float,
        started_at: str,
    ) -> RunVerdict:
        self._cancel.clear()
        verdict = RunVerdict(
            run_id=context.run_id,
            contract_id=contract.id,
            status=status,
            reason=reason,
            failing_must=list(parts.failing_must),
            skipped_must=list(parts.skipped_must),
            iterations=len(history),
            history=list(history.snapshots),
            results=list(results),
            cost_usd=cost_usd,
            elapsed_ms=int((self.clock() - started) * 1000),
            started_at=started_at,
            completed_at=utc_now().isoformat(),
        )
        run_logger.info(
            "run_terminated",
            status=status.value,
            reason=reason.value,
            iterations=verdict.iterations,
            failing_must=verdict.failing_must,
        )
        return verdict
