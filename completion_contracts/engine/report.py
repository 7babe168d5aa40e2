"""Persist a run verdict next to the per-criterion evidence records."""
from __future__ import annotations

import logging

from ..contract.results import RunVerdict
from ..runtime.storage import ArtifactStore
from ..validators.evidence import EVIDENCE_DIR

logger = logging.getLogger(__name__)

VERDICT_LOCATION = f"{EVIDENCE_DIR}/verdict.json"


def write_run_report(verdict: RunVerdict, store: ArtifactStore) -> str:
    """Write verdict.json and log a run_completed event.

    Returns:
        Location of the verdict record
    """
    store.write_json(VERDICT_LOCATION, verdict.to_dict())

    store.append_event({
        "event": "run_completed",
        "run_id": verdict.run_id,
        "contract_id": verdict.contract_id,
        "status": verdict.status.value,
        "reason": verdict.reason.value,
        "iterations": verdict.iterations,
        "failing_must": verdict.failing_must,
        "evidence": [
            r.evidence.location for r in verdict.results if r.evidence is not None
        ],
    })

    logger.info(
        f"Run report written: run={verdict.run_id}, "
        f"status={verdict.status.value}, reason={verdict.reason.value}"
    )
    return VERDICT_LOCATION
