"""
Unit tests for the integrity pass.

Covers every issue code, atomic failure, warnings and MUST coverage.
"""

import copy

import pytest

from completion_contracts.contract import (
    CompletionContract,
    CriterionType,
    IssueCode,
    IssueSeverity,
    ValidationStatus,
)
from completion_contracts.integrity import (
    AC_DEFAULT_PROVENANCE,
    AC_DEFAULT_STRUCTURE,
    AC_DEFAULT_TRACEABILITY,
    IntegrityError,
    IntegrityOptions,
    check,
    find_dependency_cycles,
)
from completion_contracts.runtime import ExecutionContext, TeamMember
from completion_contracts.validators import Validator, ValidatorRegistry

from factories import NO_DEFAULTS, make_artifact, make_contract, make_criterion

RUBRIC = {"rubricId": "R-1", "scale": [1, 2, 3, 4, 5], "passThreshold": 4}


def codes(issues):
    return [issue.code for issue in issues]


def expect_error(raw, context, registry, options=NO_DEFAULTS) -> IntegrityError:
    with pytest.raises(IntegrityError) as exc_info:
        check(raw, context, registry, options)
    return exc_info.value


class ExplodingReadiness(Validator):
    """A structure validator whose readiness check raises."""

    @property
    def id(self):
        return "test.exploding"

    @property
    def supported_types(self):
        return frozenset({CriterionType.STRUCTURE})

    def can_validate(self, criterion, contract, context):
        raise RuntimeError("boom")

    def validate(self, criterion, contract, context):
        return self.result(criterion, context, ValidationStatus.PASS, "ok")


class TestValidContracts:
    """Tests for contracts that pass the integrity pass."""

    def test_minimal_contract_passes(self, context, registry):
        result = check(make_contract(), context, registry, NO_DEFAULTS)
        assert result.contract.id == "CC-TEST"
        assert result.issues == []
        assert result.artifact_ids == ["A-SPEC"]
        assert result.must_ids == ["AC-1"]

    def test_accepts_model_instance(self, context, registry):
        contract = CompletionContract.model_validate(make_contract())
        result = check(contract, context, registry, NO_DEFAULTS)
        assert result.contract == contract
        assert result.contract is not contract

    def test_injects_defaults_when_enabled(self, context, registry):
        result = check(make_contract(), context, registry, IntegrityOptions())
        ids = [c.ac_id for c in result.contract.acceptance]
        assert ids[0] == "AC-1"
        assert AC_DEFAULT_STRUCTURE in ids
        assert AC_DEFAULT_PROVENANCE in ids
        assert AC_DEFAULT_PROVENANCE in result.must_ids

    def test_citation_pattern_option_reaches_default_criterion(self, context, registry):
        options = IntegrityOptions(citation_pattern=r"\[\d+\]")
        result = check(make_contract(), context, registry, options)
        criterion = result.contract.criterion(AC_DEFAULT_TRACEABILITY)
        assert criterion.rule.citation_pattern == r"\[\d+\]"

    def test_default_options_come_from_settings(self, context, registry):
        result = check(make_contract(), context, registry)
        assert result.contract.criterion(AC_DEFAULT_STRUCTURE) is not None

    def test_raw_document_is_not_mutated(self, context, registry):
        raw = make_contract()
        before = copy.deepcopy(raw)
        check(raw, context, registry, IntegrityOptions())
        assert raw == before

    def test_model_instance_is_not_mutated(self, context, registry):
        contract = CompletionContract.model_validate(make_contract())
        check(contract, context, registry, IntegrityOptions())
        assert [c.ac_id for c in contract.acceptance] == ["AC-1"]
        assert contract.rubrics == []


    def test_consistency_rule_accepts_judge_threshold(self, context, registry):
        raw = make_contract(
            acceptance=[
                make_criterion(
                    type="consistency",
                    rule={"adapter": "rubric.ai-judge", "rubricRef": "R-1", "passThreshold": 3},
                )
            ],
            rubrics=[RUBRIC],
        )
        result = check(raw, context, registry, NO_DEFAULTS)
        rule = result.contract.acceptance[0].rule
        assert rule.pass_threshold == 3
        assert rule.high_confidence_threshold == 0.85

    def test_rechecking_normalized_contract_is_stable(self, context, registry):
        raw = make_contract(
            artifacts=[make_artifact(), make_artifact("A-PLAN", dependsOn=["A-SPEC"])],
            packaging=[{"packageId": "P-1", "inputs": ["A-SPEC", "A-PLAN"]}],
            acceptance=[
                make_criterion(),
                make_criterion(
                    "AC-R", type="rubric", severity="should", rule={"rubricRef": "R-1"}
                ),
            ],
            rubrics=[RUBRIC],
        )
        first = check(raw, context, registry, IntegrityOptions())
        second = check(first.contract, context, registry, IntegrityOptions())

        ids = [c.ac_id for c in second.contract.acceptance]
        assert len(ids) == len(set(ids))
        assert ids == [c.ac_id for c in first.contract.acceptance]
        assert second.contract == first.contract
        assert second.must_ids == first.must_ids

        declared = set(second.artifact_ids)
        for artifact in second.contract.artifacts:
            assert set(artifact.depends_on) <= declared
        assert set(second.contract.packaged_artifact_ids()) <= declared
        for criterion in second.contract.acceptance:
            assert set(criterion.target_artifacts) <= declared
            if criterion.rule.rubric_ref:
                assert second.contract.rubric(criterion.rule.rubric_ref) is not None


class TestStructuralErrors:
    """Tests for error-severity structural issues."""

    def test_zero_artifacts_fails_fast(self, context, registry):
        error = expect_error(
            make_contract(artifacts=[], contractVersion="v0"), context, registry
        )
        assert codes(error.issues) == [
            IssueCode.ARTIFACTS_EMPTY,
            IssueCode.VERSION_UNSUPPORTED,
        ]

    def test_unsupported_version(self, context, registry):
        error = expect_error(
            make_contract(contractVersion="completion-contract/v2"), context, registry
        )
        assert codes(error.errors) == [IssueCode.VERSION_UNSUPPORTED]
        assert error.errors[0].path == "/contractVersion"

    def test_missing_version(self, context, registry):
        raw = make_contract()
        del raw["contractVersion"]
        error = expect_error(raw, context, registry)
        assert codes(error.errors) == [IssueCode.VERSION_UNSUPPORTED]

    def test_artifact_id_missing(self, context, registry):
        artifact = make_artifact()
        del artifact["artifactId"]
        error = expect_error(
            make_contract(artifacts=[artifact], acceptance=[]), context, registry
        )
        assert codes(error.errors) == [IssueCode.ARTIFACT_ID_MISSING]
        assert error.errors[0].path == "/artifacts/0/artifactId"

    def test_artifact_id_duplicate(self, context, registry):
        error = expect_error(
            make_contract(artifacts=[make_artifact(), make_artifact()]), context, registry
        )
        assert codes(error.errors) == [IssueCode.ARTIFACT_ID_DUPLICATE]
        assert error.errors[0].path == "/artifacts/1/artifactId"

    def test_artifact_formats_empty(self, context, registry):
        error = expect_error(
            make_contract(artifacts=[make_artifact(formats=[])]), context, registry
        )
        assert IssueCode.ARTIFACT_FORMATS_EMPTY in codes(error.errors)

    def test_dependency_missing(self, context, registry):
        error = expect_error(
            make_contract(artifacts=[make_artifact(dependsOn=["A-GHOST"])]),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.ARTIFACT_DEP_MISSING]
        assert error.errors[0].path == "/artifacts/0/dependsOn/0"

    def test_relationship_end_missing(self, context, registry):
        error = expect_error(
            make_contract(
                relationships=[{"type": "informs", "from": "A-SPEC", "to": "A-GHOST"}]
            ),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.RELATIONSHIP_REF_MISSING]
        assert error.errors[0].path == "/relationships/0/to"

    def test_packaging_input_missing(self, context, registry):
        error = expect_error(
            make_contract(packaging=[{"packageId": "P-1", "inputs": ["A-GHOST"]}]),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.PACKAGING_INPUT_MISSING]
        assert error.errors[0].path == "/packaging/0/inputs/0"

    def test_duplicate_criterion_id(self, context, registry):
        error = expect_error(
            make_contract(acceptance=[make_criterion(), make_criterion()]),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.AC_ID_DUPLICATE]

    def test_criterion_without_targets(self, context, registry):
        error = expect_error(
            make_contract(acceptance=[make_criterion(targets=[])]), context, registry
        )
        assert IssueCode.AC_TARGETS_EMPTY in codes(error.errors)

    def test_criterion_target_missing(self, context, registry):
        error = expect_error(
            make_contract(acceptance=[make_criterion(targets=["A-SPEC", "A-GHOST"])]),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.AC_TARGET_MISSING]
        assert error.errors[0].path == "/acceptance/0/targetArtifacts/1"

    def test_rubric_ref_missing(self, context, registry):
        error = expect_error(
            make_contract(
                acceptance=[
                    make_criterion(),
                    make_criterion(
                        "AC-2", type="rubric", severity="should", rule={"rubricRef": "R-NONE"}
                    ),
                ]
            ),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.RUBRIC_REF_MISSING]
        assert error.errors[0].path == "/acceptance/1/rule/rubricRef"

    def test_gate_rubric_ref_missing(self, context, registry):
        error = expect_error(
            make_contract(
                gates=[
                    {
                        "gateId": "G-FINAL",
                        "when": "before_final",
                        "requiredApprovals": [{"type": "ai", "rubricId": "R-NONE"}],
                    }
                ]
            ),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.GATE_RUBRIC_REF_MISSING]
        assert error.errors[0].path == "/gates/0/requiredApprovals/0/rubricId"

    def test_invalid_document_reports_contract_invalid(self, context, registry):
        error = expect_error(
            make_contract(acceptance=[{"acId": "AC-1", "targetArtifacts": ["A-SPEC"]}]),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.CONTRACT_INVALID]
        assert error.errors[0].path.startswith("/acceptance/0")

    def test_rule_errors_point_inside_rule(self, context, registry):
        error = expect_error(
            make_contract(
                acceptance=[
                    make_criterion(
                        rule={"requiredSections": ["Scope"], "minCitationCoverage": 0.5}
                    )
                ]
            ),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.CONTRACT_INVALID]
        assert error.errors[0].path == "/acceptance/0/rule/minCitationCoverage"

    def test_collects_every_error_at_once(self, context, registry):
        error = expect_error(
            make_contract(
                contractVersion="v0",
                artifacts=[make_artifact(formats=[])],
                acceptance=[make_criterion(targets=["A-GHOST"])],
            ),
            context,
            registry,
        )
        found = codes(error.errors)
        assert IssueCode.VERSION_UNSUPPORTED in found
        assert IssueCode.ARTIFACT_FORMATS_EMPTY in found
        assert IssueCode.AC_TARGET_MISSING in found

    def test_error_to_dict(self, context, registry):
        error = expect_error(make_contract(contractVersion="v0"), context, registry)
        data = error.to_dict()
        assert data["error"] == "integrity_violation"
        assert data["code"] == "CONTRACT_INTEGRITY_FAILED"
        assert data["issues"][0]["code"] == "VERSION_UNSUPPORTED"
        assert data["issues"][0]["severity"] == "error"


class TestWarnings:
    """Tests for warning-severity issues that do not block the contract."""

    def test_empty_owners_is_warning(self, context, registry):
        result = check(
            make_contract(artifacts=[make_artifact(owners=[])]),
            context,
            registry,
            NO_DEFAULTS,
        )
        assert codes(result.warnings) == [IssueCode.ARTIFACT_OWNERS_EMPTY]
        assert result.warnings[0].severity == IssueSeverity.WARNING
        assert result.warnings[0].path == "/artifacts/0/owners"

    def test_dependency_cycle_is_warning(self, context, registry):
        result = check(
            make_contract(
                artifacts=[
                    make_artifact("B", dependsOn=["A-SPEC"]),
                    make_artifact("A-SPEC", dependsOn=["B"]),
                ]
            ),
            context,
            registry,
            NO_DEFAULTS,
        )
        assert codes(result.warnings) == [IssueCode.ARTIFACT_DEP_CYCLE]
        assert "A-SPEC -> B -> A-SPEC" in result.warnings[0].message
        assert result.warnings[0].path == "/artifacts/1/dependsOn"

    def test_owner_role_not_in_team(self, registry):
        context = ExecutionContext(team=[TeamMember(role="role:reviewer", agent_id="agent-1")])
        result = check(make_contract(), context, registry, NO_DEFAULTS)
        assert codes(result.warnings) == [IssueCode.ROLE_NOT_IN_TEAM]
        assert result.warnings[0].path == "/artifacts/0/owners/0"

    def test_empty_team_skips_role_check(self, context, registry):
        result = check(make_contract(), context, registry, NO_DEFAULTS)
        assert result.warnings == []

    def test_warnings_carried_by_error(self, context, registry):
        error = expect_error(
            make_contract(contractVersion="v0", artifacts=[make_artifact(owners=[])]),
            context,
            registry,
        )
        assert IssueCode.ARTIFACT_OWNERS_EMPTY in codes(error.issues)
        assert IssueCode.ARTIFACT_OWNERS_EMPTY not in codes(error.errors)


class TestDependencyCycles:
    """Tests for dependency cycle detection."""

    def make(self, deps):
        return CompletionContract.model_validate(
            make_contract(
                artifacts=[make_artifact(aid, dependsOn=d) for aid, d in deps.items()]
            )
        )

    def test_no_cycles(self):
        assert find_dependency_cycles(self.make({"A": ["B"], "B": []})) == []

    def test_self_loop(self):
        assert find_dependency_cycles(self.make({"A": ["A"]})) == [["A"]]

    def test_three_node_cycle_rotated_to_smallest(self):
        contract = self.make({"C": ["A"], "A": ["B"], "B": ["C"]})
        assert find_dependency_cycles(contract) == [["A", "B", "C"]]

    def test_unresolved_dependencies_ignored(self):
        assert find_dependency_cycles(self.make({"A": ["GHOST"]})) == []


class TestMustCoverage:
    """Tests for the proof that every MUST criterion can be scored."""

    def test_explicit_validator_missing(self, context, registry):
        error = expect_error(
            make_contract(
                acceptance=[
                    make_criterion(rule={"requiredSections": ["Scope"], "adapter": "nope"})
                ]
            ),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.EXPLICIT_VALIDATOR_MISSING]
        assert error.errors[0].path == "/acceptance/0/rule/adapter"

    def test_explicit_validator_registered(self, context, registry):
        result = check(
            make_contract(
                acceptance=[
                    make_criterion(
                        rule={"requiredSections": ["Scope"], "adapter": "structure.required-sections"}
                    )
                ]
            ),
            context,
            registry,
            NO_DEFAULTS,
        )
        assert result.issues == []

    def test_no_validator_for_type(self, context, registry):
        error = expect_error(
            make_contract(acceptance=[make_criterion(type="security", rule={})]),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.NO_VALIDATOR_FOR_TYPE]
        assert error.errors[0].path == "/acceptance/0/type"

    def test_unverifiable_must(self, context, registry):
        error = expect_error(
            make_contract(acceptance=[make_criterion(rule={"requiredSections": []})]),
            context,
            registry,
        )
        assert codes(error.errors) == [IssueCode.UNVERIFIABLE_MUST]
        assert error.errors[0].path == "/acceptance/0"

    def test_raising_readiness_counts_as_not_ready(self, context):
        registry = ValidatorRegistry([ExplodingReadiness()])
        error = expect_error(make_contract(), context, registry)
        assert codes(error.errors) == [IssueCode.UNVERIFIABLE_MUST]

    def test_should_criteria_are_not_proven(self, context, registry):
        result = check(
            make_contract(
                acceptance=[make_criterion(type="security", severity="should", rule={})]
            ),
            context,
            registry,
            NO_DEFAULTS,
        )
        assert result.must_ids == []

    def test_coverage_check_can_be_disabled(self, context, registry):
        options = IntegrityOptions(
            inject_universal_defaults=False, require_must_coverage=False
        )
        result = check(
            make_contract(acceptance=[make_criterion(type="security", rule={})]),
            context,
            registry,
            options,
        )
        assert result.must_ids == ["AC-1"]
