"""
Completion Contract v1 Common Primitives.

These are the building blocks shared across contract objects. Field names are
snake_case in Python and camelCase in contract documents (``dependsOn``,
``rubricId``, ...); both spellings are accepted on input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr, field_validator
from pydantic.alias_generators import to_camel

from .enums import (
    ApprovalType,
    EvidenceKind,
    GateWhen,
    PackagingMethod,
    ProvenanceRequirement,
    RelationshipType,
)

CONTRACT_MODEL_CONFIG = ConfigDict(
    extra="forbid",
    populate_by_name=True,
    alias_generator=to_camel,
)


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class ArtifactFormat(BaseModel):
    """A (media type, location) pair an artifact is materialized as."""

    model_config = CONTRACT_MODEL_CONFIG

    media_type: constr(min_length=1, max_length=128) = Field(
        ..., description="MIME type (e.g., 'text/markdown')"
    )
    uri: constr(min_length=1, max_length=2000) = Field(
        ..., description="Location of the artifact in the artifact store"
    )

    @property
    def is_text(self) -> bool:
        return self.media_type.startswith("text/") or "markdown" in self.media_type


class EvidenceRequirement(BaseModel):
    """Whether evidence is mandatory for a criterion, and of which kind."""

    model_config = CONTRACT_MODEL_CONFIG

    required: bool = Field(default=True, description="Evidence is mandatory")
    evidence_type: EvidenceKind = Field(
        default=EvidenceKind.AUTO, description="Expected kind of evidence"
    )
    produced_artifact: Optional[str] = Field(
        None, description="Identifier for the produced evidence record"
    )


class Relationship(BaseModel):
    """A typed edge between two artifacts."""

    model_config = CONTRACT_MODEL_CONFIG

    type: RelationshipType
    from_artifact: str = Field(..., alias="from")
    to_artifact: str = Field(..., alias="to")
    notes: Optional[str] = None


class Rubric(BaseModel):
    """An ordered scoring scale with natural-language anchors."""

    model_config = CONTRACT_MODEL_CONFIG

    rubric_id: constr(min_length=1, max_length=128)
    scale: List[float] = Field(..., min_length=1)
    anchors: Dict[str, str] = Field(default_factory=dict)
    pass_threshold: float
    description: Optional[str] = None

    @field_validator("scale")
    @classmethod
    def _scale_is_ordered(cls, value: List[float]) -> List[float]:
        if list(value) != sorted(value):
            raise ValueError("rubric scale must be in ascending order")
        return value

    def render_text(self) -> str:
        """Render the rubric as plain text for a judge prompt."""
        low, high = self.scale[0], self.scale[-1]
        lines = [
            f"Rubric {self.rubric_id} (scale {low:g}-{high:g}, "
            f"pass >= {self.pass_threshold:g})"
        ]
        if self.description:
            lines.append(self.description)
        for point in sorted(self.anchors, key=_anchor_sort_key):
            lines.append(f"{point}: {self.anchors[point]}")
        return "\n".join(lines)


def _anchor_sort_key(point: str) -> Any:
    try:
        return (0, float(point))
    except ValueError:
        return (1, point)


class RequiredApproval(BaseModel):
    """An approval a gate needs before it opens."""

    model_config = CONTRACT_MODEL_CONFIG

    type: ApprovalType
    role: Optional[str] = None
    optional: bool = False
    rubric_id: Optional[str] = None
    pass_threshold: Optional[float] = None
    rule: Dict[str, Any] = Field(default_factory=dict)


class Gate(BaseModel):
    """A checkpoint tied to a lifecycle phase."""

    model_config = CONTRACT_MODEL_CONFIG

    gate_id: constr(min_length=1, max_length=128)
    when: GateWhen
    required_approvals: List[RequiredApproval] = Field(default_factory=list)


class PackagingStep(BaseModel):
    """How a set of artifacts is packaged for delivery."""

    model_config = CONTRACT_MODEL_CONFIG

    package_id: constr(min_length=1, max_length=128)
    inputs: List[str] = Field(default_factory=list)
    method: PackagingMethod = PackagingMethod.BUNDLE
    format: str = "zip"
    uri: str = ""
    manifest_required: bool = False


class DeliveryStep(BaseModel):
    """Where a finished package is delivered."""

    model_config = CONTRACT_MODEL_CONFIG

    delivery_id: constr(min_length=1, max_length=128)
    channel: str
    target: str
    uri: str = ""
    notify: List[str] = Field(default_factory=list)


class ProvenancePolicy(BaseModel):
    """The provenance signals every packaged artifact must carry."""

    model_config = CONTRACT_MODEL_CONFIG

    policy_id: str = "default"
    require: List[ProvenanceRequirement] = Field(default_factory=list)
    strength: str = "basic"


class ResourceConstraints(BaseModel):
    """Run budget. Unset limits are not enforced."""

    model_config = CONTRACT_MODEL_CONFIG

    max_iterations: Optional[int] = Field(None, ge=1)
    max_time_ms: Optional[int] = Field(None, ge=1)
    max_cost_usd: Optional[float] = Field(None, ge=0)
    stagnation_window: Optional[int] = Field(None, ge=2)
