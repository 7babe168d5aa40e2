"""
Completion Contract v1 Result Types.

Verdicts produced while checking and evaluating a contract: per-criterion
validation results, integrity issues, iteration snapshots and the final run
verdict.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import (
    IssueCode,
    IssueSeverity,
    RunReason,
    RunStatus,
    Severity,
    ValidationStatus,
)

_FROZEN = ConfigDict(frozen=True)


class EvidenceRef(BaseModel):
    """Pointer to a durable evidence record."""

    model_config = _FROZEN

    kind: str = Field(default="text", description="Evidence record kind")
    location: str = Field(..., description="Location in the artifact store")
    sha256: Optional[str] = Field(None, description="Hash of the record content")


class ValidationResult(BaseModel):
    """Outcome of dispatching one criterion in one pass."""

    model_config = _FROZEN

    ac_id: str
    status: ValidationStatus
    severity: Severity
    summary: str = ""
    details: Dict[str, Any] = Field(default_factory=dict)
    evidence: Optional[EvidenceRef] = None
    validator_id: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status == ValidationStatus.PASS

    @property
    def failed(self) -> bool:
        return self.status == ValidationStatus.FAIL

    @property
    def skipped(self) -> bool:
        return self.status == ValidationStatus.SKIP


class IntegrityIssue(BaseModel):
    """A single problem found by the integrity pass."""

    model_config = _FROZEN

    severity: IssueSeverity
    code: IssueCode
    message: str
    path: str = Field(default="", description="JSON pointer into the contract")

    @property
    def is_error(self) -> bool:
        return self.severity == IssueSeverity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "code": self.code.value,
            "message": self.message,
            "path": self.path,
        }


class IterationSnapshot(BaseModel):
    """One entry of the run history."""

    model_config = _FROZEN

    iteration: int = Field(..., ge=1)
    quality_score: Optional[float] = None
    failing_must: List[str] = Field(default_factory=list)
    failing_should: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    stagnant: bool = False
    elapsed_ms: int = 0
    cost_usd: float = 0.0


class RunVerdict(BaseModel):
    """Terminal outcome of a run, the audit-facing output of the engine."""

    run_id: str
    contract_id: Optional[str] = None
    status: RunStatus
    reason: RunReason
    failing_must: List[str] = Field(default_factory=list)
    skipped_must: List[str] = Field(default_factory=list)
    iterations: int = 0
    history: List[IterationSnapshot] = Field(default_factory=list)
    results: List[ValidationResult] = Field(default_factory=list)
    cost_usd: float = 0.0
    elapsed_ms: int = 0
    started_at: str
    completed_at: str

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
