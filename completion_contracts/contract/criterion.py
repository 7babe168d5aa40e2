"""
Completion Contract v1 Acceptance Criterion Schema.

A criterion is a checkable condition over one or more artifacts. Its ``rule``
payload is a tagged union keyed by the criterion ``type``: each validator
family receives a statically known shape.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    constr,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .enums import CriterionType, ProvenanceRequirement, Severity
from .primitives import CONTRACT_MODEL_CONFIG, EvidenceRequirement


class RuleBase(BaseModel):
    """Fields every rule payload may carry."""

    model_config = CONTRACT_MODEL_CONFIG

    adapter: Optional[str] = Field(
        None, description="Explicit validator id; bypasses type-based selection"
    )
    rubric_ref: Optional[str] = Field(
        None, description="Rubric id used by rubric-capable validators"
    )
    description: Optional[str] = None


class StructureRule(RuleBase):
    required_sections: List[str] = Field(default_factory=list)


class TraceabilityRule(RuleBase):
    min_citation_coverage: Optional[float] = Field(None, ge=0, le=1)
    citation_pattern: Optional[str] = None

    @field_validator("citation_pattern")
    @classmethod
    def _pattern_compiles(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"citation pattern does not compile: {e}") from e
        return value


class ConsistencyRule(RuleBase):
    high_confidence_threshold: float = Field(default=0.85, ge=0, le=1)
    pass_threshold: Optional[float] = Field(
        None, description="Judge score override when routed to a rubric judge"
    )


class ProvenanceRule(RuleBase):
    require: Optional[List[ProvenanceRequirement]] = None


class SchemaRule(RuleBase):
    json_schema: Optional[str] = Field(
        None, description="Reference to a JSON Schema document"
    )


class RubricRule(RuleBase):
    pass_threshold: Optional[float] = None


class GenericRule(RuleBase):
    """Free-form payload for types without a baseline validator."""

    model_config = ConfigDict(
        extra="allow", populate_by_name=True, alias_generator=to_camel
    )


RULE_MODELS: Dict[CriterionType, Type[RuleBase]] = {
    CriterionType.STRUCTURE: StructureRule,
    CriterionType.TRACEABILITY: TraceabilityRule,
    CriterionType.CONSISTENCY: ConsistencyRule,
    CriterionType.PROVENANCE: ProvenanceRule,
    CriterionType.SCHEMA: SchemaRule,
    CriterionType.RUBRIC: RubricRule,
}

Rule = Union[
    StructureRule,
    TraceabilityRule,
    ConsistencyRule,
    ProvenanceRule,
    SchemaRule,
    RubricRule,
    GenericRule,
]


def rule_model_for(criterion_type: CriterionType) -> Type[RuleBase]:
    return RULE_MODELS.get(criterion_type, GenericRule)


class AcceptanceCriterion(BaseModel):
    """A checkable condition against one or more artifacts.

    Invariants (checked by the integrity pass):
    - ac_id MUST be unique within the contract.
    - target_artifacts MUST be non-empty and resolve to declared artifacts.
    - rule.rubric_ref, if set, MUST resolve to a declared rubric.
    """

    model_config = CONTRACT_MODEL_CONFIG

    ac_id: constr(min_length=1, max_length=128) = Field(
        ..., description="Criterion identifier"
    )
    target_artifacts: List[str] = Field(
        default_factory=list, description="Artifact ids this criterion checks"
    )
    type: CriterionType = Field(..., description="Criterion type tag")
    severity: Severity = Field(default=Severity.MUST)
    rule: Rule = Field(default_factory=dict, validate_default=True)
    evidence: EvidenceRequirement = Field(default_factory=EvidenceRequirement)

    @field_validator("rule", mode="before")
    @classmethod
    def _coerce_rule_variant(cls, value: Any, info: ValidationInfo) -> Any:
        """Parse a raw rule mapping into the variant matching the criterion type."""
        if value is None:
            value = {}
        if not isinstance(value, dict):
            return value
        criterion_type = info.data.get("type")
        if criterion_type is None:
            return GenericRule.model_validate(value)
        return rule_model_for(criterion_type).model_validate(value)

    @property
    def is_must(self) -> bool:
        return self.severity == Severity.MUST

    @property
    def explicit_validator(self) -> Optional[str]:
        return self.rule.adapter
