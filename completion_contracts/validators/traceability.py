"""Citation coverage over heading, list-item and sentence chunks."""
from __future__ import annotations

import re
from typing import Any, Dict, FrozenSet, List

from ..contract.criterion import AcceptanceCriterion, TraceabilityRule
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType, ValidationStatus
from ..contract.results import ValidationResult
from ..runtime.context import ExecutionContext
from ..runtime.storage import ArtifactReadError
from .base import Validator, read_artifact_text
from .text import UNSOURCED_MARKER, split_chunks

# Markdown link: [label](target)
DEFAULT_CITATION_PATTERN = r"\[[^\]]+\]\(([^)]+)\)"
DEFAULT_MIN_COVERAGE = 0.5


def citation_coverage(text: str, pattern: "re.Pattern[str]") -> Dict[str, Any]:
    chunks = split_chunks(text)
    cited = sum(
        1 for chunk in chunks if pattern.search(chunk) or UNSOURCED_MARKER.search(chunk)
    )
    total = max(1, len(chunks))
    return {"cited": cited, "total": total, "coverage": cited / total}


class TraceabilityValidator(Validator):
    """Pass iff the worst-cited target meets the minimum coverage."""

    @property
    def id(self) -> str:
        return "traceability.citation-coverage"

    @property
    def supported_types(self) -> FrozenSet[CriterionType]:
        return frozenset({CriterionType.TRACEABILITY})

    def can_validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> bool:
        rule = criterion.rule
        return isinstance(rule, TraceabilityRule) and (
            rule.min_citation_coverage is not None or rule.citation_pattern is not None
        )

    def validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> ValidationResult:
        rule = criterion.rule
        min_coverage = getattr(rule, "min_citation_coverage", None)
        if min_coverage is None:
            min_coverage = DEFAULT_MIN_COVERAGE
        pattern = re.compile(
            getattr(rule, "citation_pattern", None) or DEFAULT_CITATION_PATTERN
        )

        per_artifact: List[Dict[str, Any]] = []
        for artifact_id in criterion.target_artifacts:
            try:
                text = read_artifact_text(
                    contract.artifact(artifact_id), context, artifact_id
                )
            except ArtifactReadError as e:
                per_artifact.append(
                    {"artifact_id": artifact_id, "cited": 0, "total": 1,
                     "coverage": 0.0, "error": e.reason}
                )
                continue
            per_artifact.append({"artifact_id": artifact_id, **citation_coverage(text, pattern)})

        worst = min((x["coverage"] for x in per_artifact), default=1.0)
        passed = worst >= min_coverage

        lines = [f"min_coverage={min_coverage}"]
        lines.extend(
            f"{x['artifact_id']}: coverage={x['coverage']:.3f} ({x['cited']}/{x['total']})"
            for x in per_artifact
        )
        lines.append(f"worst={worst:.3f}")

        return self.result(
            criterion,
            context,
            ValidationStatus.PASS if passed else ValidationStatus.FAIL,
            "Citation coverage meets threshold."
            if passed
            else "Citation coverage below threshold.",
            details={
                "min_coverage": min_coverage,
                "per_artifact": per_artifact,
                "worst": worst,
            },
            lines=lines,
        )
