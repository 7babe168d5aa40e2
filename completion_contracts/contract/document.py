"""
Completion Contract v1 Document Schema.

The top-level contract: artifacts, acceptance criteria, rubrics, gates,
packaging, delivery, provenance policy and resource constraints.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .artifact import Artifact
from .criterion import AcceptanceCriterion
from .enums import Severity
from .primitives import (
    CONTRACT_MODEL_CONFIG,
    DeliveryStep,
    Gate,
    PackagingStep,
    ProvenancePolicy,
    Relationship,
    ResourceConstraints,
    Rubric,
)

# The only contract format version this engine interprets.
CONTRACT_VERSION = "completion-contract/v1"


class CompletionContract(BaseModel):
    """Declarative definition of what "done" means for a run.

    The model is deliberately permissive about cross-references and
    cardinalities; those are proven by the integrity pass so that every
    problem can be reported at once.
    """

    model_config = CONTRACT_MODEL_CONFIG

    contract_version: Optional[str] = Field(
        None, description=f"Contract format version, must be '{CONTRACT_VERSION}'"
    )
    id: Optional[str] = Field(None, description="Contract identifier")
    title: str = ""
    summary: str = ""
    intent: Dict[str, Any] = Field(default_factory=dict)

    artifacts: List[Artifact] = Field(default_factory=list)
    relationships: List[Relationship] = Field(default_factory=list)
    acceptance: List[AcceptanceCriterion] = Field(default_factory=list)
    rubrics: List[Rubric] = Field(default_factory=list)
    gates: List[Gate] = Field(default_factory=list)
    packaging: List[PackagingStep] = Field(default_factory=list)
    delivery: List[DeliveryStep] = Field(default_factory=list)

    provenance_policy: ProvenancePolicy = Field(default_factory=ProvenancePolicy)
    risk_controls: Dict[str, Any] = Field(default_factory=dict)
    resource_constraints: ResourceConstraints = Field(
        default_factory=ResourceConstraints
    )

    def artifact(self, artifact_id: str) -> Optional[Artifact]:
        for artifact in self.artifacts:
            if artifact.artifact_id == artifact_id:
                return artifact
        return None

    def rubric(self, rubric_id: str) -> Optional[Rubric]:
        for rubric in self.rubrics:
            if rubric.rubric_id == rubric_id:
                return rubric
        return None

    def criterion(self, ac_id: str) -> Optional[AcceptanceCriterion]:
        for criterion in self.acceptance:
            if criterion.ac_id == ac_id:
                return criterion
        return None

    def artifact_ids(self) -> List[str]:
        return [a.artifact_id for a in self.artifacts if a.artifact_id]

    def required_artifacts(self) -> List[Artifact]:
        return [a for a in self.artifacts if a.required]

    def must_criteria(self) -> List[AcceptanceCriterion]:
        return [c for c in self.acceptance if c.severity == Severity.MUST]

    def packaged_artifact_ids(self) -> List[str]:
        """Every artifact referenced by a packaging step, in first-seen order."""
        seen: List[str] = []
        for step in self.packaging:
            for artifact_id in step.inputs:
                if artifact_id not in seen:
                    seen.append(artifact_id)
        return seen

    def to_document(self) -> Dict[str, Any]:
        """Serialize with contract-document (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
