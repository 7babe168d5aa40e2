"""
Completion Contract v1 Canonical Enums.

These enums define the allowed values for fields across contract objects.
Contract documents MUST use these values verbatim.
"""

from enum import Enum


class CriterionType(str, Enum):
    """Closed set of acceptance criterion types."""

    SCHEMA = "schema"
    STRUCTURE = "structure"
    TRACEABILITY = "traceability"
    CONSISTENCY = "consistency"
    RUBRIC = "rubric"
    CONSTRAINT = "constraint"
    EXECUTION = "execution"
    SECURITY = "security"
    PROVENANCE = "provenance"
    CUSTOM = "custom"


class Severity(str, Enum):
    """Criterion severity. Only MUST blocks successful termination."""

    MUST = "must"
    SHOULD = "should"
    MAY = "may"


class EvidenceKind(str, Enum):
    """How evidence for a criterion is produced."""

    AUTO = "auto"
    AI_JUDGED = "ai-judged"
    HUMAN = "human"
    HYBRID = "hybrid"


class QualityLevel(str, Enum):
    """Target quality level of an artifact."""

    DRAFT = "draft"
    REVIEWED = "reviewed"
    PRODUCTION = "production"


class RelationshipType(str, Enum):
    """Typed edges between artifacts."""

    DERIVES_FROM = "derivesFrom"
    INFORMS = "informs"
    IMPLEMENTS = "implements"
    TESTS = "tests"
    SUMMARIZES = "summarizes"
    REFERENCES = "references"
    DEPENDS_ON = "dependsOn"


class GateWhen(str, Enum):
    """Lifecycle phase a gate is attached to."""

    BEFORE_FINAL = "before_final"
    BEFORE_PACKAGING = "before_packaging"
    BEFORE_DELIVERY = "before_delivery"


class ApprovalType(str, Enum):
    """Who grants a gate approval."""

    AUTO = "auto"
    AI = "ai"
    HUMAN = "human"


class PackagingMethod(str, Enum):
    """How packaging inputs are combined."""

    BUNDLE = "bundle"
    COMPOSE = "compose"
    TRANSFORM = "transform"


class ProvenanceRequirement(str, Enum):
    """Provenance signals a policy can demand."""

    INPUTS_ENUMERATED = "inputs.enumerated"
    TOOLING_RECORDED = "tooling.recorded"
    AGENT_ACTIONS_LOGGED = "agentActions.logged"
    ARTIFACT_HASHES_RECORDED = "artifactHashes.recorded"
    DEPENDENCIES_RECORDED = "dependencies.recorded"
    PARAMETERS_RECORDED = "parameters.recorded"
    ATTESTATION_SIGNED = "attestation.signed"


class ValidationStatus(str, Enum):
    """Outcome of a single criterion evaluation."""

    PASS = "pass"
    FAIL = "fail"
    SKIP = "skip"


class IssueSeverity(str, Enum):
    """Integrity issue severity. Any ERROR makes a contract unusable."""

    ERROR = "error"
    WARNING = "warning"


class IssueCode(str, Enum):
    """Stable, machine-readable integrity issue codes."""

    CONTRACT_INVALID = "CONTRACT_INVALID"
    ARTIFACTS_EMPTY = "ARTIFACTS_EMPTY"
    VERSION_UNSUPPORTED = "VERSION_UNSUPPORTED"
    ARTIFACT_ID_MISSING = "ARTIFACT_ID_MISSING"
    ARTIFACT_ID_DUPLICATE = "ARTIFACT_ID_DUPLICATE"
    ARTIFACT_FORMATS_EMPTY = "ARTIFACT_FORMATS_EMPTY"
    ARTIFACT_OWNERS_EMPTY = "ARTIFACT_OWNERS_EMPTY"
    ARTIFACT_DEP_MISSING = "ARTIFACT_DEP_MISSING"
    ARTIFACT_DEP_CYCLE = "ARTIFACT_DEP_CYCLE"
    RELATIONSHIP_REF_MISSING = "RELATIONSHIP_REF_MISSING"
    PACKAGING_INPUT_MISSING = "PACKAGING_INPUT_MISSING"
    AC_ID_DUPLICATE = "AC_ID_DUPLICATE"
    AC_TARGETS_EMPTY = "AC_TARGETS_EMPTY"
    AC_TARGET_MISSING = "AC_TARGET_MISSING"
    RUBRIC_REF_MISSING = "RUBRIC_REF_MISSING"
    GATE_RUBRIC_REF_MISSING = "GATE_RUBRIC_REF_MISSING"
    ROLE_NOT_IN_TEAM = "ROLE_NOT_IN_TEAM"
    EXPLICIT_VALIDATOR_MISSING = "EXPLICIT_VALIDATOR_MISSING"
    NO_VALIDATOR_FOR_TYPE = "NO_VALIDATOR_FOR_TYPE"
    UNVERIFIABLE_MUST = "UNVERIFIABLE_MUST"


class RunStatus(str, Enum):
    """Terminal status of a run."""

    SUCCESS = "success"
    FAILURE = "failure"


class RunReason(str, Enum):
    """Why a run terminated."""

    CRITERIA_SATISFIED = "criteria_satisfied"
    MAX_PASSES = "max_passes"
    MAX_TIME = "max_time"
    MAX_COST = "max_cost"
    STAGNANT = "stagnant"
    CANCELLED = "cancelled"
