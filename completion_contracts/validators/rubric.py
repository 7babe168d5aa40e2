"""Rubric scoring through the context's AI judge callback."""
from __future__ import annotations

from typing import FrozenSet, Optional

from ..contract.criterion import AcceptanceCriterion
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType, ValidationStatus
from ..contract.results import ValidationResult
from ..runtime.context import ExecutionContext
from ..runtime.storage import ArtifactReadError
from .base import Validator, read_artifact_text


class RubricJudgeValidator(Validator):
    """Score the first target against a declared rubric.

    With no judge configured the result is skip, never fail. Otherwise the
    criterion passes iff the judged score reaches the threshold; the rule's
    ``pass_threshold`` overrides the rubric's own.
    """

    @property
    def id(self) -> str:
        return "rubric.ai-judge"

    @property
    def supported_types(self) -> FrozenSet[CriterionType]:
        return frozenset({CriterionType.RUBRIC, CriterionType.CONSISTENCY})

    def can_validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> bool:
        ref = criterion.rule.rubric_ref
        return bool(ref) and contract.rubric(ref) is not None

    def validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> ValidationResult:
        ref = criterion.rule.rubric_ref or ""
        rubric = contract.rubric(ref)
        threshold: Optional[float] = getattr(criterion.rule, "pass_threshold", None)
        if threshold is None:
            threshold = rubric.pass_threshold if rubric else 0.0
        target = criterion.target_artifacts[0] if criterion.target_artifacts else None
        details = {"rubric_ref": ref, "pass_threshold": threshold, "target": target}
        header = [f"Rubric={ref}", f"pass_threshold={threshold:g}", f"Target={target or '(none)'}"]

        if context.ai_judge is None:
            return self.result(
                criterion,
                context,
                ValidationStatus.SKIP,
                "AI rubric judge not configured; skipped.",
                details=details,
                lines=header + ["Provide ExecutionContext.ai_judge to enable."],
            )

        content = ""
        if target:
            try:
                content = read_artifact_text(contract.artifact(target), context, target)
            except ArtifactReadError as e:
                details["read_error"] = e.reason

        rubric_text = rubric.render_text() if rubric else f"Rubric {ref} not found."
        judged = context.ai_judge(rubric_text, content, threshold, criterion.ac_id)
        passed = judged.score >= threshold
        details.update(
            {"score": judged.score, "model": judged.model, "rationale": judged.rationale}
        )

        return self.result(
            criterion,
            context,
            ValidationStatus.PASS if passed else ValidationStatus.FAIL,
            "Rubric evaluation passed." if passed else "Rubric evaluation failed.",
            details=details,
            lines=header
            + [
                f"score={judged.score:g}",
                f"model={judged.model or '(unspecified)'}",
                "rationale:",
                judged.rationale,
            ],
        )
