"""
Universal default rubrics and acceptance criteria.

Injection is pure and idempotent: it returns a new contract and only adds an
entry whose id is not already present.
"""

from __future__ import annotations

from typing import List, Optional

from ..contract.artifact import Artifact
from ..contract.criterion import (
    AcceptanceCriterion,
    ConsistencyRule,
    ProvenanceRule,
    StructureRule,
    TraceabilityRule,
)
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType, EvidenceKind, Severity
from ..contract.primitives import EvidenceRequirement, Rubric
from ..validators.traceability import DEFAULT_CITATION_PATTERN

RUBRIC_OVERALL = "RUBRIC-OVERALL"
RUBRIC_CLARITY = "RUBRIC-CLARITY"

AC_DEFAULT_STRUCTURE = "AC-DEFAULT-STRUCTURE"
AC_DEFAULT_TRACEABILITY = "AC-DEFAULT-TRACEABILITY"
AC_DEFAULT_CONSISTENCY = "AC-DEFAULT-CONSISTENCY"
AC_DEFAULT_PROVENANCE = "AC-DEFAULT-PROVENANCE"

DEFAULT_REQUIRED_SECTIONS = ["Scope", "Assumptions", "Risks", "Acceptance Criteria"]
DEFAULT_MIN_CITATION_COVERAGE = 0.6


def default_rubrics() -> List[Rubric]:
    return [
        Rubric(
            rubric_id=RUBRIC_OVERALL,
            scale=[1, 2, 3, 4, 5],
            anchors={
                "1": "Incorrect or incomplete; fails core requirements",
                "3": "Mostly correct; notable gaps or rough edges",
                "5": "Polished, correct and consistent; ready for delivery",
            },
            pass_threshold=4,
            description="Overall fitness of the deliverable",
        ),
        Rubric(
            rubric_id=RUBRIC_CLARITY,
            scale=[1, 2, 3, 4, 5],
            anchors={
                "1": "Hard to follow; ambiguous; missing context",
                "3": "Understandable; some ambiguities",
                "5": "Clear, structured and actionable",
            },
            pass_threshold=4,
            description="Clarity of the written deliverable",
        ),
    ]


def _ids(artifacts: List[Artifact]) -> List[str]:
    return [a.artifact_id for a in artifacts if a.artifact_id]


def fallback_targets(contract: CompletionContract) -> List[str]:
    """The first required artifact, or the first artifact if none is required."""
    required = _ids(contract.required_artifacts())
    if required:
        return required[:1]
    return _ids(contract.artifacts)[:1]


def find_specification_artifacts(contract: CompletionContract) -> List[str]:
    ids = _ids([a for a in contract.required_artifacts() if a.looks_like_specification])
    return ids or fallback_targets(contract)


def find_narrative_artifacts(contract: CompletionContract) -> List[str]:
    required = contract.required_artifacts()
    if not required:
        return fallback_targets(contract)
    ids = _ids([a for a in required if a.is_narrative])
    return ids or _ids(required) or fallback_targets(contract)


def find_required_artifacts(contract: CompletionContract) -> List[str]:
    return _ids(contract.required_artifacts()) or fallback_targets(contract)


def find_packaged_artifacts(contract: CompletionContract) -> List[str]:
    return contract.packaged_artifact_ids() or fallback_targets(contract)


def _evidence(ac_id: str, kind: EvidenceKind = EvidenceKind.AUTO) -> EvidenceRequirement:
    return EvidenceRequirement(required=True, evidence_type=kind, produced_artifact=f"E-{ac_id}")


def default_criteria(
    contract: CompletionContract, citation_pattern: Optional[str] = None
) -> List[AcceptanceCriterion]:
    """The baseline criteria, targeted at this contract's artifacts."""
    return [
        AcceptanceCriterion(
            ac_id=AC_DEFAULT_STRUCTURE,
            target_artifacts=find_specification_artifacts(contract),
            type=CriterionType.STRUCTURE,
            severity=Severity.MUST,
            rule=StructureRule(required_sections=list(DEFAULT_REQUIRED_SECTIONS)),
            evidence=_evidence(AC_DEFAULT_STRUCTURE),
        ),
        AcceptanceCriterion(
            ac_id=AC_DEFAULT_TRACEABILITY,
            target_artifacts=find_narrative_artifacts(contract),
            type=CriterionType.TRACEABILITY,
            severity=Severity.SHOULD,
            rule=TraceabilityRule(
                description=(
                    "Key claims should be backed by citations or explicit "
                    "UNSOURCED/INFERENCE labels."
                ),
                min_citation_coverage=DEFAULT_MIN_CITATION_COVERAGE,
                citation_pattern=citation_pattern or DEFAULT_CITATION_PATTERN,
            ),
            evidence=_evidence(AC_DEFAULT_TRACEABILITY),
        ),
        AcceptanceCriterion(
            ac_id=AC_DEFAULT_CONSISTENCY,
            target_artifacts=find_required_artifacts(contract),
            type=CriterionType.CONSISTENCY,
            severity=Severity.SHOULD,
            rule=ConsistencyRule(
                description=(
                    "Artifacts should not contradict each other on scope and decisions."
                ),
            ),
            evidence=_evidence(AC_DEFAULT_CONSISTENCY, EvidenceKind.AI_JUDGED),
        ),
        AcceptanceCriterion(
            ac_id=AC_DEFAULT_PROVENANCE,
            target_artifacts=find_packaged_artifacts(contract),
            type=CriterionType.PROVENANCE,
            severity=Severity.MUST,
            rule=ProvenanceRule(require=list(contract.provenance_policy.require)),
            evidence=_evidence(AC_DEFAULT_PROVENANCE),
        ),
    ]


def inject_defaults(
    contract: CompletionContract, citation_pattern: Optional[str] = None
) -> CompletionContract:
    """Return a copy of ``contract`` with missing default rubrics and criteria appended."""
    normalized = contract.model_copy(deep=True)

    existing_rubrics = {r.rubric_id for r in normalized.rubrics}
    for rubric in default_rubrics():
        if rubric.rubric_id not in existing_rubrics:
            normalized.rubrics.append(rubric)

    existing_criteria = {c.ac_id for c in normalized.acceptance}
    for criterion in default_criteria(normalized, citation_pattern):
        if criterion.ac_id not in existing_criteria:
            normalized.acceptance.append(criterion)

    return normalized
