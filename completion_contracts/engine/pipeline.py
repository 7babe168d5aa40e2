"""
End-to-end evaluation: integrity pass, convergence run, run report.
"""
from __future__ import annotations

from typing import Optional

from ..contract.results import RunVerdict
from ..integrity.gate import IntegrityOptions, RawContract, check
from ..runtime.context import ExecutionContext
from ..validators.registry import ValidatorRegistry, build_default_registry
from .loop import ConvergenceEngine, Refiner
from .report import write_run_report


def evaluate_contract(
    raw_contract: RawContract,
    context: ExecutionContext,
    registry: Optional[ValidatorRegistry] = None,
    refiner: Optional[Refiner] = None,
    options: Optional[IntegrityOptions] = None,
    max_workers: Optional[int] = None,
    persist_report: bool = True,
) -> RunVerdict:
    """Check a contract and drive it to a verdict.

    Raises:
        IntegrityError: If the contract is unusable; no iteration is started
    """
    if registry is None:
        registry = build_default_registry()

    integrity = check(raw_contract, context, registry, options)
    engine = ConvergenceEngine(registry, refiner=refiner, max_workers=max_workers)
    verdict = engine.run(integrity.contract, context)

    if persist_report:
        write_run_report(verdict, context.artifacts)
    return verdict
