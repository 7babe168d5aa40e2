"""Convergence Engine: termination law, run history and the iteration loop."""

from .history import RunHistory
from .loop import ConvergenceEngine, RefinementReport, RefinementRequest, Refiner
from .pipeline import evaluate_contract
from .report import VERDICT_LOCATION, write_run_report
from .termination import (
    Budget,
    Partition,
    aggregate_quality_score,
    decide,
    exhausted_resource,
    is_stagnant,
    made_progress,
    partition,
)

__all__ = [
    "ConvergenceEngine",
    "RefinementRequest",
    "RefinementReport",
    "Refiner",
    "RunHistory",
    "evaluate_contract",
    "write_run_report",
    "VERDICT_LOCATION",
    "Budget",
    "Partition",
    "partition",
    "made_progress",
    "is_stagnant",
    "exhausted_resource",
    "decide",
    "aggregate_quality_score",
]
