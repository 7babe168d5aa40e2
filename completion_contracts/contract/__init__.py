"""
Completion Contract Model v1

A completion contract is the data describing what "done" means for an
autonomous multi-step task:

- Artifact: Required or optional output unit a run must produce
- AcceptanceCriterion: Checkable condition over artifacts (MUST/SHOULD/MAY)
- Rubric: Ordered scoring scale used by judged criteria and gate approvals
- Gate: Lifecycle checkpoint with required approvals
- ProvenancePolicy / ResourceConstraints: Audit and budget envelope

Result types (ValidationResult, IntegrityIssue, IterationSnapshot, RunVerdict)
are the outputs of the integrity pass and the convergence engine.
"""

# Enums
from .enums import (
    ApprovalType,
    CriterionType,
    EvidenceKind,
    GateWhen,
    IssueCode,
    IssueSeverity,
    PackagingMethod,
    ProvenanceRequirement,
    QualityLevel,
    RelationshipType,
    RunReason,
    RunStatus,
    Severity,
    ValidationStatus,
)

# Primitives
from .primitives import (
    ArtifactFormat,
    DeliveryStep,
    EvidenceRequirement,
    Gate,
    PackagingStep,
    ProvenancePolicy,
    Relationship,
    RequiredApproval,
    ResourceConstraints,
    Rubric,
    utc_now,
)

# Object types
from .artifact import Artifact
from .criterion import (
    AcceptanceCriterion,
    ConsistencyRule,
    GenericRule,
    ProvenanceRule,
    Rule,
    RuleBase,
    RubricRule,
    SchemaRule,
    StructureRule,
    TraceabilityRule,
    rule_model_for,
)
from .document import CONTRACT_VERSION, CompletionContract
from .loader import load_contract
from .results import (
    EvidenceRef,
    IntegrityIssue,
    IterationSnapshot,
    RunVerdict,
    ValidationResult,
)

__all__ = [
    "CONTRACT_VERSION",
    # Enums
    "ApprovalType",
    "CriterionType",
    "EvidenceKind",
    "GateWhen",
    "IssueCode",
    "IssueSeverity",
    "PackagingMethod",
    "ProvenanceRequirement",
    "QualityLevel",
    "RelationshipType",
    "RunReason",
    "RunStatus",
    "Severity",
    "ValidationStatus",
    # Primitives
    "ArtifactFormat",
    "DeliveryStep",
    "EvidenceRequirement",
    "Gate",
    "PackagingStep",
    "ProvenancePolicy",
    "Relationship",
    "RequiredApproval",
    "ResourceConstraints",
    "Rubric",
    "utc_now",
    # Object types
    "Artifact",
    "AcceptanceCriterion",
    "RuleBase",
    "StructureRule",
    "TraceabilityRule",
    "ConsistencyRule",
    "ProvenanceRule",
    "SchemaRule",
    "RubricRule",
    "GenericRule",
    "Rule",
    "rule_model_for",
    "CompletionContract",
    "load_contract",
    # Results
    "EvidenceRef",
    "ValidationResult",
    "IntegrityIssue",
    "IterationSnapshot",
    "RunVerdict",
]
