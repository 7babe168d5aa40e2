"""
Criterion dispatch.

Every dispatched criterion yields exactly one ValidationResult and one
evidence record. Validator exceptions become ``fail`` results; they never
escape into the evaluation pass.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

import structlog

from ..contract.criterion import AcceptanceCriterion
from ..contract.document import CompletionContract
from ..contract.enums import ValidationStatus
from ..contract.results import ValidationResult
from ..runtime.context import ExecutionContext
from .evidence import build_result, evidence_location
from .registry import ValidatorRegistry

logger = structlog.get_logger()


def dispatch(
    criterion: AcceptanceCriterion,
    contract: CompletionContract,
    context: ExecutionContext,
    registry: ValidatorRegistry,
) -> ValidationResult:
    """Score one criterion with the explicitly named or first ready validator."""
    ac_logger = logger.bind(run_id=context.run_id, ac_id=criterion.ac_id)

    explicit = criterion.explicit_validator
    validator = registry.select(criterion, contract, context)

    if validator is None:
        if explicit:
            ac_logger.error("validator_not_registered", validator_id=explicit)
            return build_result(
                criterion,
                context,
                ValidationStatus.FAIL,
                f"Explicit validator '{explicit}' is not registered.",
                validator_id=explicit,
                details={"error": "validator_not_registered"},
            )
        ac_logger.info("no_ready_validator", criterion_type=criterion.type.value)
        return build_result(
            criterion,
            context,
            ValidationStatus.SKIP,
            f"No ready validator for type '{criterion.type.value}'; skipped.",
            details={"candidates": [v.id for v in registry.candidates(criterion.type)]},
        )

    try:
        result = validator.validate(criterion, contract, context)
    except Exception as e:
        ac_logger.error("validator_raised", validator_id=validator.id, error=str(e))
        return _error_result(criterion, context, validator.id, e)

    ac_logger.info(
        "criterion_evaluated",
        validator_id=validator.id,
        status=result.status.value,
    )
    return result


def _error_result(
    criterion: AcceptanceCriterion,
    context: ExecutionContext,
    validator_id: str,
    error: Exception,
) -> ValidationResult:
    summary = f"Validator raised: {type(error).__name__}: {error}"
    details = {"error": str(error), "error_type": type(error).__name__}
    try:
        return build_result(
            criterion,
            context,
            ValidationStatus.FAIL,
            summary,
            validator_id=validator_id,
            details=details,
        )
    except Exception as write_error:
        # Evidence store itself is broken; still report the failure.
        logger.error(
            "evidence_write_failed",
            run_id=context.run_id,
            ac_id=criterion.ac_id,
            location=evidence_location(criterion.ac_id),
            error=str(write_error),
        )
        return ValidationResult(
            ac_id=criterion.ac_id,
            status=ValidationStatus.FAIL,
            severity=criterion.severity,
            summary=summary,
            details={**details, "evidence_error": str(write_error)},
            validator_id=validator_id,
        )


def dispatch_all(
    contract: CompletionContract,
    context: ExecutionContext,
    registry: ValidatorRegistry,
    max_workers: Optional[int] = None,
) -> List[ValidationResult]:
    """Dispatch every criterion with bounded parallelism.

    Returns results in contract order, only once the whole batch has finished.
    """
    criteria = list(contract.acceptance)
    if not criteria:
        return []

    workers = max(1, min(max_workers or 1, len(criteria)))
    if workers == 1:
        return [dispatch(c, contract, context, registry) for c in criteria]

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="validator") as pool:
        futures = [
            pool.submit(dispatch, c, contract, context, registry) for c in criteria
        ]
        return [f.result() for f in futures]
