"""
Evidence records for dispatched criteria.

One text record per criterion id at ``evidence/<ac_id>.txt``; each pass
overwrites the previous record for the same id.
"""
from __future__ import annotations

import re
from typing import Any, Dict, Iterable, Optional

from ..contract.criterion import AcceptanceCriterion
from ..contract.enums import ValidationStatus
from ..contract.results import EvidenceRef, ValidationResult
from ..runtime.context import ExecutionContext
from ..runtime.storage import sha256_text

EVIDENCE_DIR = "evidence"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def evidence_location(ac_id: str) -> str:
    """Deterministic evidence location for a criterion id.

    Ids that need sanitizing get a short digest of the raw id appended, so two
    distinct ids never share a record.
    """
    safe = _UNSAFE.sub("_", ac_id)
    if safe != ac_id:
        safe = f"{safe}-{sha256_text(ac_id)[:8]}"
    return f"{EVIDENCE_DIR}/{safe}.txt"


def render_narrative(
    criterion: AcceptanceCriterion,
    status: ValidationStatus,
    summary: str,
    validator_id: Optional[str],
    lines: Iterable[str] = (),
) -> str:
    header = [
        f"{status.value.upper()}: {criterion.ac_id}",
        f"type: {criterion.type.value}",
        f"severity: {criterion.severity.value}",
        f"validator: {validator_id or 'none'}",
        f"targets: {', '.join(criterion.target_artifacts) or '-'}",
        "",
        summary,
    ]
    body = list(lines)
    if body:
        header.append("")
        header.extend(body)
    return "\n".join(header) + "\n"


def write_evidence(context: ExecutionContext, ac_id: str, text: str) -> EvidenceRef:
    location = evidence_location(ac_id)
    context.artifacts.write_text(location, text)
    return EvidenceRef(kind="text", location=location, sha256=sha256_text(text))


def build_result(
    criterion: AcceptanceCriterion,
    context: ExecutionContext,
    status: ValidationStatus,
    summary: str,
    validator_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    lines: Iterable[str] = (),
) -> ValidationResult:
    """Write the evidence record and return the matching result."""
    narrative = render_narrative(criterion, status, summary, validator_id, lines)
    evidence = write_evidence(context, criterion.ac_id, narrative)
    return ValidationResult(
        ac_id=criterion.ac_id,
        status=status,
        severity=criterion.severity,
        summary=summary,
        details=details or {},
        evidence=evidence,
        validator_id=validator_id,
    )
