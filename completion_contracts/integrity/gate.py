"""
Integrity gate for Completion Contract v1.

A pure pre-flight pass over a contract. It either returns a normalized copy
(universal defaults injected) together with any warnings, or raises an
IntegrityError carrying every issue found. The caller's contract is never
mutated.

Integrity Rules (in order):
- the contract must declare at least one artifact
- contract_version must be "completion-contract/v1"
- artifact ids must be present and unique; every artifact needs a format;
  empty owners is a warning
- depends_on and relationship ends must resolve; dependency cycles are a warning
- packaging inputs must resolve
- criterion ids must be unique; targets must be non-empty and resolve
- rubric references (criterion rules, gate approvals) must resolve
- owner roles missing from a non-empty team roster are a warning
- universal defaults are injected (if enabled)
- every MUST criterion must resolve a validator (if enabled)

Configuration:
- COMPLETION_INJECT_UNIVERSAL_DEFAULTS, COMPLETION_REQUIRE_MUST_COVERAGE and
  COMPLETION_CITATION_PATTERN provide the default IntegrityOptions.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from ..contract.document import CONTRACT_VERSION, CompletionContract
from ..contract.enums import IssueCode, IssueSeverity
from ..contract.results import IntegrityIssue
from ..runtime.context import ExecutionContext
from ..validators.registry import ValidatorRegistry, is_ready
from .defaults import inject_defaults

logger = logging.getLogger(__name__)

RawContract = Union[CompletionContract, Mapping[str, Any]]


def _get_default_integrity_options() -> "IntegrityOptions":
    """
    Get default integrity options from environment settings.

    This lazy-loads the settings to avoid circular imports.
    """
    from ..config import settings

    return IntegrityOptions(
        inject_universal_defaults=settings.inject_universal_defaults,
        require_must_coverage=settings.require_must_coverage,
        citation_pattern=settings.citation_pattern,
    )


class IntegrityOptions(BaseModel):
    """Configuration for the integrity pass."""

    inject_universal_defaults: bool = True
    require_must_coverage: bool = True
    citation_pattern: Optional[str] = None


class IntegrityError(Exception):
    """
    Raised when a contract fails the integrity pass.

    Attributes:
        code: Stable error code for programmatic handling
        message: Human-readable error description
        issues: Every issue found, errors and warnings, in check order
    """

    def __init__(
        self,
        message: str,
        issues: List[IntegrityIssue],
        code: str = "CONTRACT_INTEGRITY_FAILED",
    ):
        self.code = code
        self.message = message
        self.issues = list(issues)
        super().__init__(f"{code}: {message}")

    @property
    def errors(self) -> List[IntegrityIssue]:
        return [i for i in self.issues if i.is_error]

    def to_dict(self) -> dict:
        """Convert to dict for JSON serialization."""
        return {
            "error": "integrity_violation",
            "code": self.code,
            "message": self.message,
            "issues": [i.to_dict() for i in self.issues],
        }


@dataclass
class IntegrityResult:
    """A contract that passed the integrity pass."""
    contract: CompletionContract
    issues: List[IntegrityIssue] = field(default_factory=list)
    artifact_ids: List[str] = field(default_factory=list)
    must_ids: List[str] = field(default_factory=list)

    @property
    def warnings(self) -> List[IntegrityIssue]:
        return [i for i in self.issues if not i.is_error]


def _error(code: IssueCode, message: str, path: str) -> IntegrityIssue:
    return IntegrityIssue(
        severity=IssueSeverity.ERROR, code=code, message=message, path=path
    )


def _warning(code: IssueCode, message: str, path: str) -> IntegrityIssue:
    return IntegrityIssue(
        severity=IssueSeverity.WARNING, code=code, message=message, path=path
    )


def _pointer(loc: Tuple[Any, ...]) -> str:
    parts = [str(p).replace("~", "~0").replace("/", "~1") for p in loc]
    return "/" + "/".join(parts)


def _parse(raw: RawContract) -> CompletionContract:
    """Deep-copy and parse the caller's contract."""
    if isinstance(raw, CompletionContract):
        return raw.model_copy(deep=True)
    try:
        return CompletionContract.model_validate(copy.deepcopy(dict(raw)))
    except ValidationError as e:
        issues = [
            _error(IssueCode.CONTRACT_INVALID, err["msg"], _pointer(err["loc"]))
            for err in e.errors()
        ]
        logger.warning(f"Contract failed to parse with {len(issues)} error(s)")
        raise IntegrityError(
            "Contract document is not a valid completion contract", issues
        ) from e


def _check_version(contract: CompletionContract, issues: List[IntegrityIssue]) -> None:
    if contract.contract_version != CONTRACT_VERSION:
        issues.append(_error(
            IssueCode.VERSION_UNSUPPORTED,
            f"Unsupported contract version: {contract.contract_version!r} "
            f"(expected {CONTRACT_VERSION!r})",
            "/contractVersion",
        ))


def _check_artifacts(contract: CompletionContract, issues: List[IntegrityIssue]) -> List[str]:
    seen: List[str] = []
    for i, artifact in enumerate(contract.artifacts):
        if not artifact.artifact_id:
            issues.append(_error(
                IssueCode.ARTIFACT_ID_MISSING,
                "artifactId missing",
                f"/artifacts/{i}/artifactId",
            ))
            continue
        if artifact.artifact_id in seen:
            issues.append(_error(
                IssueCode.ARTIFACT_ID_DUPLICATE,
                f"Duplicate artifactId: {artifact.artifact_id}",
                f"/artifacts/{i}/artifactId",
            ))
        else:
            seen.append(artifact.artifact_id)
        if not artifact.formats:
            issues.append(_error(
                IssueCode.ARTIFACT_FORMATS_EMPTY,
                f"Artifact {artifact.artifact_id} declares no formats",
                f"/artifacts/{i}/formats",
            ))
        if not artifact.owners:
            issues.append(_warning(
                IssueCode.ARTIFACT_OWNERS_EMPTY,
                f"Artifact {artifact.artifact_id} has no owners (reduces accountability)",
                f"/artifacts/{i}/owners",
            ))
    return seen


def find_dependency_cycles(contract: CompletionContract) -> List[List[str]]:
    """Distinct cycles in the resolvable depends_on graph, each rotated to start at its smallest id."""
    known = set(contract.artifact_ids())
    graph: Dict[str, List[str]] = {}
    for artifact in contract.artifacts:
        if artifact.artifact_id:
            graph.setdefault(artifact.artifact_id, []).extend(
                d for d in artifact.depends_on if d in known
            )

    cycles: List[List[str]] = []
    seen_keys = set()
    done = set()

    def visit(node: str, stack: List[str]) -> None:
        if node in stack:
            cycle = stack[stack.index(node):]
            start = cycle.index(min(cycle))
            rotated = cycle[start:] + cycle[:start]
            key = tuple(rotated)
            if key not in seen_keys:
                seen_keys.add(key)
                cycles.append(rotated)
            return
        if node in done:
            return
        stack.append(node)
        for dep in graph.get(node, []):
            visit(dep, stack)
        stack.pop()
        done.add(node)

    for node in graph:
        visit(node, [])
    return cycles


def _check_references(
    contract: CompletionContract, known: List[str], issues: List[IntegrityIssue]
) -> None:
    known_set = set(known)

    for i, artifact in enumerate(contract.artifacts):
        for j, dep in enumerate(artifact.depends_on):
            if dep not in known_set:
                issues.append(_error(
                    IssueCode.ARTIFACT_DEP_MISSING,
                    f"Artifact {artifact.artifact_id} dependsOn missing artifactId: {dep}",
                    f"/artifacts/{i}/dependsOn/{j}",
                ))

    index = {a.artifact_id: i for i, a in enumerate(contract.artifacts) if a.artifact_id}
    for cycle in find_dependency_cycles(contract):
        issues.append(_warning(
            IssueCode.ARTIFACT_DEP_CYCLE,
            f"Dependency cycle: {' -> '.join(cycle + cycle[:1])}",
            f"/artifacts/{index[cycle[0]]}/dependsOn",
        ))

    for i, rel in enumerate(contract.relationships):
        for end, value in (("from", rel.from_artifact), ("to", rel.to_artifact)):
            if value not in known_set:
                issues.append(_error(
                    IssueCode.RELATIONSHIP_REF_MISSING,
                    f"Relationship {rel.type.value} references missing artifactId: {value}",
                    f"/relationships/{i}/{end}",
                ))

    for i, step in enumerate(contract.packaging):
        for j, artifact_id in enumerate(step.inputs):
            if artifact_id not in known_set:
                issues.append(_error(
                    IssueCode.PACKAGING_INPUT_MISSING,
                    f"Packaging {step.package_id} input references missing artifactId: {artifact_id}",
                    f"/packaging/{i}/inputs/{j}",
                ))


def _check_criteria(
    contract: CompletionContract, known: List[str], issues: List[IntegrityIssue]
) -> None:
    known_set = set(known)
    seen = set()
    for i, criterion in enumerate(contract.acceptance):
        if criterion.ac_id in seen:
            issues.append(_error(
                IssueCode.AC_ID_DUPLICATE,
                f"Duplicate acId: {criterion.ac_id}",
                f"/acceptance/{i}/acId",
            ))
        seen.add(criterion.ac_id)

        if not criterion.target_artifacts:
            issues.append(_error(
                IssueCode.AC_TARGETS_EMPTY,
                f"Acceptance {criterion.ac_id} has no target artifacts",
                f"/acceptance/{i}/targetArtifacts",
            ))
        for j, target in enumerate(criterion.target_artifacts):
            if target not in known_set:
                issues.append(_error(
                    IssueCode.AC_TARGET_MISSING,
                    f"Acceptance {criterion.ac_id} targets missing artifactId: {target}",
                    f"/acceptance/{i}/targetArtifacts/{j}",
                ))


def _check_rubric_refs(contract: CompletionContract, issues: List[IntegrityIssue]) -> None:
    rubric_ids = {r.rubric_id for r in contract.rubrics}
    for i, criterion in enumerate(contract.acceptance):
        ref = criterion.rule.rubric_ref
        if ref and ref not in rubric_ids:
            issues.append(_error(
                IssueCode.RUBRIC_REF_MISSING,
                f"Acceptance {criterion.ac_id} references missing rubricId: {ref}",
                f"/acceptance/{i}/rule/rubricRef",
            ))

    for i, gate in enumerate(contract.gates):
        for j, approval in enumerate(gate.required_approvals):
            if approval.rubric_id and approval.rubric_id not in rubric_ids:
                issues.append(_error(
                    IssueCode.GATE_RUBRIC_REF_MISSING,
                    f"Gate {gate.gate_id} approval references missing rubricId: {approval.rubric_id}",
                    f"/gates/{i}/requiredApprovals/{j}/rubricId",
                ))


def _check_team_roles(
    contract: CompletionContract, context: ExecutionContext, issues: List[IntegrityIssue]
) -> None:
    roles = context.team_roles()
    if not roles:
        return
    for i, artifact in enumerate(contract.artifacts):
        for j, owner in enumerate(artifact.owners):
            if owner not in roles:
                issues.append(_warning(
                    IssueCode.ROLE_NOT_IN_TEAM,
                    f"Artifact owner role not found in team: {owner}",
                    f"/artifacts/{i}/owners/{j}",
                ))


def _check_must_coverage(
    contract: CompletionContract,
    context: ExecutionContext,
    registry: ValidatorRegistry,
    issues: List[IntegrityIssue],
) -> None:
    for i, criterion in enumerate(contract.acceptance):
        if not criterion.is_must:
            continue

        explicit = criterion.explicit_validator
        if explicit:
            if registry.get(explicit) is None:
                issues.append(_error(
                    IssueCode.EXPLICIT_VALIDATOR_MISSING,
                    f"MUST criterion {criterion.ac_id} names validator '{explicit}', "
                    f"but no such validator is registered",
                    f"/acceptance/{i}/rule/adapter",
                ))
            continue

        candidates = registry.candidates(criterion.type)
        if not candidates:
            issues.append(_error(
                IssueCode.NO_VALIDATOR_FOR_TYPE,
                f"No validator registered for MUST criterion type "
                f"'{criterion.type.value}' (acId={criterion.ac_id})",
                f"/acceptance/{i}/type",
            ))
            continue

        if not any(is_ready(v, criterion, contract, context) for v in candidates):
            issues.append(_error(
                IssueCode.UNVERIFIABLE_MUST,
                f"MUST criterion {criterion.ac_id} is unverifiable by registered "
                f"validators (type='{criterion.type.value}')",
                f"/acceptance/{i}",
            ))


def _has_errors(issues: List[IntegrityIssue]) -> bool:
    return any(i.is_error for i in issues)


def check(
    raw_contract: RawContract,
    context: ExecutionContext,
    registry: ValidatorRegistry,
    options: Optional[IntegrityOptions] = None,
) -> IntegrityResult:
    """
    Run the integrity pass over a contract.

    Args:
        raw_contract: Contract document mapping or CompletionContract (never mutated)
        context: Execution context (team roster, readiness inputs)
        registry: Validators available for the MUST-coverage proof
        options: Integrity options (defaults from settings if None)

    Returns:
        IntegrityResult with the normalized contract and any warnings

    Raises:
        IntegrityError: If any issue has error severity
    """
    if options is None:
        options = _get_default_integrity_options()

    contract = _parse(raw_contract)
    issues: List[IntegrityIssue] = []

    if not contract.artifacts:
        issues.append(_error(
            IssueCode.ARTIFACTS_EMPTY,
            "Contract must declare at least one artifact",
            "/artifacts",
        ))
        _check_version(contract, issues)
        raise IntegrityError("Contract failed integrity pass", issues)

    _check_version(contract, issues)
    artifact_ids = _check_artifacts(contract, issues)
    _check_references(contract, artifact_ids, issues)
    _check_criteria(contract, artifact_ids, issues)
    _check_rubric_refs(contract, issues)
    _check_team_roles(contract, context, issues)

    if options.inject_universal_defaults and not _has_errors(issues):
        contract = inject_defaults(contract, options.citation_pattern)

    if options.require_must_coverage:
        _check_must_coverage(contract, context, registry, issues)

    if _has_errors(issues):
        logger.warning(
            f"Contract {contract.id} failed integrity pass: "
            f"{sum(1 for i in issues if i.is_error)} error(s), "
            f"{sum(1 for i in issues if not i.is_error)} warning(s)"
        )
        raise IntegrityError("Contract failed integrity pass", issues)

    logger.info(
        f"Contract {contract.id} passed integrity pass: "
        f"{len(contract.acceptance)} criteria, {len(issues)} warning(s)"
    )
    return IntegrityResult(
        contract=contract,
        issues=issues,
        artifact_ids=artifact_ids,
        must_ids=[c.ac_id for c in contract.must_criteria()],
    )
