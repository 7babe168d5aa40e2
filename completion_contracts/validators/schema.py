"""JSON Schema validation of JSON artifacts."""
from __future__ import annotations

import json
import logging
from types import ModuleType
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from ..contract.criterion import AcceptanceCriterion, SchemaRule
from ..contract.document import CompletionContract
from ..contract.enums import CriterionType, ValidationStatus
from ..contract.results import ValidationResult
from ..runtime.context import ExecutionContext
from ..runtime.storage import ArtifactReadError
from .base import Validator, read_artifact_text

logger = logging.getLogger(__name__)

MAX_REPORTED_ERRORS = 20

EngineLoader = Callable[[], Optional[ModuleType]]
SchemaLoader = Callable[[str, ExecutionContext], Dict[str, Any]]


def load_jsonschema() -> Optional[ModuleType]:
    """Import the schema engine, or None when it is not installed."""
    try:
        import jsonschema
    except ImportError as e:
        logger.warning(f"jsonschema import failed: {e}")
        return None
    return jsonschema


def load_schema_from_store(ref: str, context: ExecutionContext) -> Dict[str, Any]:
    """Read a schema document through the context's artifact store."""
    return json.loads(context.artifacts.read_text(ref))


class SchemaValidator(Validator):
    """Validate every target as a JSON instance of the referenced schema.

    Returns skip, not fail, when the schema engine cannot be loaded.
    """

    def __init__(
        self,
        engine_loader: Optional[EngineLoader] = None,
        schema_loader: Optional[SchemaLoader] = None,
    ):
        self.engine_loader = engine_loader or load_jsonschema
        self.schema_loader = schema_loader or load_schema_from_store

    @property
    def id(self) -> str:
        return "schema.json-schema"

    @property
    def supported_types(self) -> FrozenSet[CriterionType]:
        return frozenset({CriterionType.SCHEMA})

    def can_validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> bool:
        rule = criterion.rule
        return isinstance(rule, SchemaRule) and bool(rule.json_schema)

    def validate(
        self,
        criterion: AcceptanceCriterion,
        contract: CompletionContract,
        context: ExecutionContext,
    ) -> ValidationResult:
        ref = getattr(criterion.rule, "json_schema", None) or ""

        engine = self.engine_loader()
        if engine is None:
            return self.result(
                criterion,
                context,
                ValidationStatus.SKIP,
                "JSON Schema engine not available; skipped.",
                details={"schema": ref},
                lines=[f"Schema: {ref}", "Install 'jsonschema' to enable this check."],
            )

        try:
            schema = self.schema_loader(ref, context)
        except (ArtifactReadError, ValueError) as e:
            return self.result(
                criterion,
                context,
                ValidationStatus.FAIL,
                f"Schema {ref} could not be loaded.",
                details={"schema": ref, "error": str(e)},
                lines=[f"Schema: {ref}", f"Error: {e}"],
            )

        validator_cls = engine.validators.validator_for(schema)
        schema_validator = validator_cls(schema)

        errors: Dict[str, List[str]] = {}
        for artifact_id in criterion.target_artifacts:
            try:
                instance = json.loads(
                    read_artifact_text(contract.artifact(artifact_id), context, artifact_id)
                )
            except ArtifactReadError as e:
                errors[artifact_id] = [f"unreadable: {e.reason}"]
                continue
            except json.JSONDecodeError as e:
                errors[artifact_id] = [f"invalid JSON: {e}"]
                continue
            found = [
                f"{'/'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
                for err in schema_validator.iter_errors(instance)
            ]
            if found:
                errors[artifact_id] = found[:MAX_REPORTED_ERRORS]

        passed = not errors
        lines = [f"Schema: {ref}"]
        for artifact_id, messages in errors.items():
            lines.append(f"{artifact_id}:")
            lines.extend(f"- {m}" for m in messages)

        return self.result(
            criterion,
            context,
            ValidationStatus.PASS if passed else ValidationStatus.FAIL,
            "All targets conform to the schema."
            if passed
            else "One or more targets do not conform to the schema.",
            details={"schema": ref, "errors": errors},
            lines=lines,
        )
