"""Cross-artifact contradiction signals."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from itertools import permutations
from typing import Dict, FrozenSet, List

from ..contract.criterion import AcceptanceCriterion
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType, ValidationStatus
from ..contract.results import ValidationResult
from ..runtime.context import ExecutionContext
from ..runtime.storage import ArtifactReadError
from .base import Validator, read_artifact_text
from .text import (
    extract_section,
    list_items_under,
    must_statements,
    negates,
    normalize_item,
    trim_to,
)

logger = logging.getLogger(__name__)

OUT_OF_SCOPE_HEADINGS = ("Out of Scope", "Non-goals", "Non Goals")
SCOPE_CONFIDENCE = 0.9
NEGATION_CONFIDENCE = 0.86
DEFAULT_HIGH_CONFIDENCE = 0.85


@dataclass
class ContradictionSignal:
    """A possible contradiction between two artifacts."""
    confidence: float
    summary: str


def mentions_as_in_scope(text: str, item: str) -> bool:
    block = extract_section(text, "In Scope")
    if block is None:
        block = extract_section(text, "Objectives")
    if not block:
        return False
    return normalize_item(item) in normalize_item(block)


def find_contradiction_signals(texts: Dict[str, str]) -> List[ContradictionSignal]:
    """Scope and negation signals across every ordered pair of artifacts."""
    signals: List[ContradictionSignal] = []
    if len(texts) < 2:
        return signals

    out_of_scope = {
        aid: list_items_under(text, OUT_OF_SCOPE_HEADINGS) for aid, text in texts.items()
    }
    for a, b in permutations(texts, 2):
        for item in out_of_scope[a]:
            if mentions_as_in_scope(texts[b], item):
                signals.append(ContradictionSignal(
                    SCOPE_CONFIDENCE,
                    f"{b} treats '{item}' as in-scope, but {a} lists it out-of-scope.",
                ))

    musts = {aid: must_statements(text) for aid, text in texts.items()}
    for a, b in permutations(texts, 2):
        for statement in musts[a]:
            if negates(texts[b], statement):
                signals.append(ContradictionSignal(
                    NEGATION_CONFIDENCE,
                    f"{b} negates a MUST/SHALL from {a}: '{trim_to(statement, 120)}'",
                ))

    return signals


class ConsistencyValidator(Validator):
    """Pass iff no contradiction signal reaches the high-confidence threshold."""

    @property
    def id(self) -> str:
        return "consistency.cross-check"

    @property
    def supported_types(self) -> FrozenSet[CriterionType]:
        return frozenset({CriterionType.CONSISTENCY})

    def can_validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> bool:
        return True

    def validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> ValidationResult:
        threshold = getattr(
            criterion.rule, "high_confidence_threshold", DEFAULT_HIGH_CONFIDENCE
        )

        texts: Dict[str, str] = {}
        unreadable: Dict[str, str] = {}
        for artifact_id in criterion.target_artifacts:
            try:
                texts[artifact_id] = read_artifact_text(
                    contract.artifact(artifact_id), context, artifact_id
                )
            except ArtifactReadError as e:
                logger.info(f"Consistency check skipping {artifact_id}: {e.reason}")
                unreadable[artifact_id] = e.reason

        signals = find_contradiction_signals(texts)
        high = [s for s in signals if s.confidence >= threshold]
        passed = not high

        lines = [f"Checked artifacts: {', '.join(texts) or '-'}"]
        if unreadable:
            lines.append(f"Not readable: {', '.join(unreadable)}")
        lines.append("Signals:")
        lines.extend(f"- [{s.confidence:.2f}] {s.summary}" for s in signals)
        if not signals:
            lines.append("- none")
        lines.append(f"high_confidence={len(high)} threshold={threshold}")

        return self.result(
            criterion,
            context,
            ValidationStatus.PASS if passed else ValidationStatus.FAIL,
            "No high-confidence contradictions detected."
            if passed
            else "Potential contradictions detected.",
            details={
                "signals": [asdict(s) for s in signals],
                "high_confidence": [asdict(s) for s in high],
                "unreadable": unreadable,
            },
            lines=lines,
        )
