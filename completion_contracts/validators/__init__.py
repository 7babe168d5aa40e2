"""
Validator Dispatch

Polymorphic validators keyed by criterion type, an ordered registry, and the
dispatch functions that turn each acceptance criterion into a pass/fail/skip
result backed by an evidence record.
"""

from .base import Validator, read_artifact_text
from .consistency import ConsistencyValidator, find_contradiction_signals
from .dispatch import dispatch, dispatch_all
from .evidence import EVIDENCE_DIR, evidence_location
from .provenance import ProvenanceValidator
from .registry import ValidatorRegistry, build_default_registry, is_ready
from .rubric import RubricJudgeValidator
from .schema import SchemaValidator, load_jsonschema
from .structure import StructureValidator
from .traceability import DEFAULT_CITATION_PATTERN, TraceabilityValidator

__all__ = [
    "Validator",
    "read_artifact_text",
    "ValidatorRegistry",
    "build_default_registry",
    "is_ready",
    "dispatch",
    "dispatch_all",
    "EVIDENCE_DIR",
    "evidence_location",
    "DEFAULT_CITATION_PATTERN",
    "StructureValidator",
    "TraceabilityValidator",
    "ConsistencyValidator",
    "ProvenanceValidator",
    "SchemaValidator",
    "RubricJudgeValidator",
    "find_contradiction_signals",
    "load_jsonschema",
]
