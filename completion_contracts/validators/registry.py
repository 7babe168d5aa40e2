"""
Ordered validator registry.

Registration order is dispatch order: for a criterion without an explicit
adapter, the first type-capable validator whose readiness check accepts wins.
"""
from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional

from ..contract.criterion import AcceptanceCriterion
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType
from ..runtime.context import ExecutionContext
from .base import Validator
from .consistency import ConsistencyValidator
from .provenance import ProvenanceValidator
from .rubric import RubricJudgeValidator
from .schema import EngineLoader, SchemaLoader, SchemaValidator
from .structure import StructureValidator
from .traceability import TraceabilityValidator

logger = logging.getLogger(__name__)


def is_ready(
    validator: Validator,
    criterion: AcceptanceCriterion,
    contract: CompletionContract,
    context: ExecutionContext,
) -> bool:
    """Run a readiness check; one that raises counts as not ready."""
    try:
        return bool(validator.can_validate(criterion, contract, context))
    except Exception as e:
        logger.warning(
            f"Readiness check of {validator.id} raised for {criterion.ac_id}: {e}"
        )
        return False


class ValidatorRegistry:
    """Ordered, duplicate-free list of validators."""

    def __init__(self, validators: Optional[Iterable[Validator]] = None):
        self._validators: List[Validator] = []
        for validator in validators or []:
            self.register(validator)

    def register(self, validator: Validator) -> None:
        """Append a validator.

        Raises:
            ValueError: If a validator with the same id is already registered
        """
        if self.get(validator.id) is not None:
            raise ValueError(f"Validator already registered: {validator.id}")
        self._validators.append(validator)

    def get(self, validator_id: str) -> Optional[Validator]:
        for validator in self._validators:
            if validator.id == validator_id:
                return validator
        return None

    def candidates(self, criterion_type: CriterionType) -> List[Validator]:
        return [v for v in self._validators if criterion_type in v.supported_types]

    def supports(self, criterion_type: CriterionType) -> bool:
        return bool(self.candidates(criterion_type))

    def select(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> Optional[Validator]:
        """Resolve the validator that should score a criterion, if any."""
        explicit = criterion.explicit_validator
        if explicit:
            return self.get(explicit)
        for validator in self.candidates(criterion.type):
            if is_ready(validator, criterion, contract, context):
                return validator
        return None

    def ids(self) -> List[str]:
        return [v.id for v in self._validators]

    def __iter__(self) -> Iterator[Validator]:
        return iter(list(self._validators))

    def __len__(self) -> int:
        return len(self._validators)


def build_default_registry(
    schema_engine_loader: Optional[EngineLoader] = None,
    schema_loader: Optional[SchemaLoader] = None,
) -> ValidatorRegistry:
    """Registry with the baseline validators in their canonical order."""
    return ValidatorRegistry([
        StructureValidator(),
        TraceabilityValidator(),
        ConsistencyValidator(),
        ProvenanceValidator(),
        SchemaValidator(engine_loader=schema_engine_loader, schema_loader=schema_loader),
        RubricJudgeValidator(),
    ])
