"""
Completion Contracts

Declarative completion contracts for autonomous multi-step tasks, with the
integrity checker, validator dispatch and convergence engine that decide when
a run has truly finished.
"""

import importlib.metadata

__version__ = importlib.metadata.version("completion-contracts")

from .contract import (
    CONTRACT_VERSION,
    AcceptanceCriterion,
    Artifact,
    CompletionContract,
    RunVerdict,
    ValidationResult,
    load_contract,
)
from .engine import ConvergenceEngine, RefinementReport, RefinementRequest, evaluate_contract
from .integrity import IntegrityError, IntegrityOptions, IntegrityResult, check
from .runtime import (
    ExecutionContext,
    FileArtifactStore,
    InMemoryArtifactStore,
    JudgeScore,
    ProvenanceSignals,
    TeamMember,
)
from .validators import Validator, ValidatorRegistry, build_default_registry, dispatch

__all__ = [
    "CONTRACT_VERSION",
    "AcceptanceCriterion",
    "Artifact",
    "CompletionContract",
    "RunVerdict",
    "ValidationResult",
    "load_contract",
    "ConvergenceEngine",
    "RefinementReport",
    "RefinementRequest",
    "evaluate_contract",
    "IntegrityError",
    "IntegrityOptions",
    "IntegrityResult",
    "check",
    "ExecutionContext",
    "FileArtifactStore",
    "InMemoryArtifactStore",
    "JudgeScore",
    "ProvenanceSignals",
    "TeamMember",
    "Validator",
    "ValidatorRegistry",
    "build_default_registry",
    "dispatch",
]
