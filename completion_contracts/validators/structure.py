"""Required-sections check over textual artifacts."""
from __future__ import annotations

import json
from typing import Dict, FrozenSet, List

from ..contract.criterion import AcceptanceCriterion, StructureRule
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType, ValidationStatus
from ..contract.results import ValidationResult
from ..runtime.context import ExecutionContext
from ..runtime.storage import ArtifactReadError
from .base import Validator, read_artifact_text
from .text import has_section


class StructureValidator(Validator):
    """Pass iff every target contains every required section."""

    @property
    def id(self) -> str:
        return "structure.required-sections"

    @property
    def supported_types(self) -> FrozenSet[CriterionType]:
        return frozenset({CriterionType.STRUCTURE})

    def can_validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> bool:
        rule = criterion.rule
        return isinstance(rule, StructureRule) and len(rule.required_sections) > 0

    def validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> ValidationResult:
        required: List[str] = list(getattr(criterion.rule, "required_sections", []))
        missing: Dict[str, List[str]] = {}
        unreadable: Dict[str, str] = {}

        for artifact_id in criterion.target_artifacts:
            try:
                text = read_artifact_text(
                    contract.artifact(artifact_id), context, artifact_id
                )
            except ArtifactReadError as e:
                unreadable[artifact_id] = e.reason
                missing[artifact_id] = list(required)
                continue
            not_found = [s for s in required if not has_section(text, s)]
            if not_found:
                missing[artifact_id] = not_found

        lines = [f"Required: {', '.join(required)}"]
        if missing:
            lines.append("Missing:")
            lines.append(json.dumps(missing, indent=2))
        if unreadable:
            lines.append("Unreadable:")
            lines.extend(f"- {aid}: {reason}" for aid, reason in unreadable.items())

        passed = not missing
        return self.result(
            criterion,
            context,
            ValidationStatus.PASS if passed else ValidationStatus.FAIL,
            "All required sections present."
            if passed
            else "One or more required sections are missing.",
            details={"required": required, "missing": missing, "unreadable": unreadable},
            lines=lines,
        )
