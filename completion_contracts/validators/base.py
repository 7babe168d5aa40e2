"""
Validator interface.

A validator declares a stable id, the criterion types it supports, a cheap
readiness predicate and the scoring operation. Nothing else.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, FrozenSet, Iterable, Optional

from ..contract.artifact import Artifact
from ..contract.criterion import AcceptanceCriterion
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType, ValidationStatus
from ..contract.results import ValidationResult
from ..runtime.context import ExecutionContext
from ..runtime.storage import ArtifactReadError
from .evidence import build_result


class Validator(ABC):
    """Abstract base class for criterion validators."""

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable validator id, referenced by ``rule.adapter``."""
        pass

    @property
    @abstractmethod
    def supported_types(self) -> FrozenSet[CriterionType]:
        """Criterion types this validator can score."""
        pass

    @abstractmethod
    def can_validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> bool:
        """Cheap readiness check. Must not touch artifact content."""
        pass

    @abstractmethod
    def validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> ValidationResult:
        """Score the criterion and write its evidence record."""
        pass

    def result(
        self,
        criterion: AcceptanceCriterion,
        context: ExecutionContext,
        status: ValidationStatus,
        summary: str,
        details: Optional[Dict[str, Any]] = None,
        lines: Iterable[str] = (),
    ) -> ValidationResult:
        return build_result(
            criterion,
            context,
            status,
            summary,
            validator_id=self.id,
            details=details,
            lines=lines,
        )


def read_artifact_text(
    artifact: Optional[Artifact], context: ExecutionContext, artifact_id: str = ""
) -> str:
    """Read the textual form of an artifact from the context's store.

    Raises:
        ArtifactReadError: If the artifact is undeclared, has no format, or
            its location cannot be read
    """
    if artifact is None:
        raise ArtifactReadError(artifact_id, "artifact is not declared")
    fmt = artifact.text_format()
    if fmt is None:
        raise ArtifactReadError(artifact.artifact_id or artifact_id, "no formats")
    return context.artifacts.read_text(fmt.uri)
