"""Required provenance signals against the context's signal snapshot."""
from __future__ import annotations

from typing import FrozenSet, List

from ..contract.criterion import AcceptanceCriterion, ProvenanceRule
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType, ValidationStatus
from ..contract.results import ValidationResult
from ..runtime.context import ExecutionContext
from .base import Validator


class ProvenanceValidator(Validator):
    """Pass iff every required signal is true.

    A context without any signal snapshot fails: provenance cannot be assumed
    in the absence of evidence.
    """

    @property
    def id(self) -> str:
        return "provenance.required-signals"

    @property
    def supported_types(self) -> FrozenSet[CriterionType]:
        return frozenset({CriterionType.PROVENANCE})

    def can_validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> bool:
        rule = criterion.rule
        return isinstance(rule, ProvenanceRule) and rule.require is not None

    def validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> ValidationResult:
        required = list(getattr(criterion.rule, "require", None) or [])
        required_names = [r.value for r in required]

        if context.provenance_signals is None:
            return self.result(
                criterion,
                context,
                ValidationStatus.FAIL,
                "No provenance signals supplied by the execution context.",
                details={"required": required_names, "missing": required_names},
                lines=[f"Required: {', '.join(required_names) or '-'}"],
            )

        observed = context.provenance_signals.as_map()
        missing: List[str] = [r.value for r in required if not observed.get(r, False)]
        passed = not missing

        lines = [f"Required: {', '.join(required_names) or '-'}"]
        lines.extend(
            f"{r.value}={'true' if observed.get(r, False) else 'false'}" for r in required
        )
        return self.result(
            criterion,
            context,
            ValidationStatus.PASS if passed else ValidationStatus.FAIL,
            "All required provenance signals present."
            if passed
            else f"Missing provenance signals: {', '.join(missing)}",
            details={"required": required_names, "missing": missing},
            lines=lines,
        )
