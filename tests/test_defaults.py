"""Unit tests for universal default injection."""

from completion_contracts.contract import (
    CompletionContract,
    CriterionType,
    EvidenceKind,
    Severity,
)
from completion_contracts.integrity import (
    AC_DEFAULT_CONSISTENCY,
    AC_DEFAULT_PROVENANCE,
    AC_DEFAULT_STRUCTURE,
    AC_DEFAULT_TRACEABILITY,
    DEFAULT_REQUIRED_SECTIONS,
    RUBRIC_CLARITY,
    RUBRIC_OVERALL,
    default_rubrics,
    inject_defaults,
)
from completion_contracts.integrity.defaults import (
    fallback_targets,
    find_narrative_artifacts,
    find_packaged_artifacts,
    find_specification_artifacts,
)
from completion_contracts.validators import DEFAULT_CITATION_PATTERN

from factories import make_artifact, make_contract, make_criterion


def build(**overrides) -> CompletionContract:
    return CompletionContract.model_validate(make_contract(**overrides))


class TestInjectDefaults:
    """Tests for appending the baseline rubrics and criteria."""

    def test_appends_rubrics_and_criteria(self):
        contract = inject_defaults(build())
        assert [r.rubric_id for r in contract.rubrics] == [RUBRIC_OVERALL, RUBRIC_CLARITY]
        assert [c.ac_id for c in contract.acceptance] == [
            "AC-1",
            AC_DEFAULT_STRUCTURE,
            AC_DEFAULT_TRACEABILITY,
            AC_DEFAULT_CONSISTENCY,
            AC_DEFAULT_PROVENANCE,
        ]

    def test_is_idempotent(self):
        once = inject_defaults(build())
        twice = inject_defaults(once)
        assert twice == once

    def test_does_not_mutate_input(self):
        contract = build()
        inject_defaults(contract)
        assert [c.ac_id for c in contract.acceptance] == ["AC-1"]
        assert contract.rubrics == []

    def test_existing_ids_are_kept(self):
        contract = build(
            acceptance=[
                make_criterion(AC_DEFAULT_STRUCTURE, rule={"requiredSections": ["Intro"]})
            ],
            rubrics=[{"rubricId": RUBRIC_OVERALL, "scale": [0, 1], "passThreshold": 1}],
        )
        injected = inject_defaults(contract)
        structure = injected.criterion(AC_DEFAULT_STRUCTURE)
        assert structure.rule.required_sections == ["Intro"]
        assert injected.rubric(RUBRIC_OVERALL).scale == [0, 1]
        assert [c.ac_id for c in injected.acceptance].count(AC_DEFAULT_STRUCTURE) == 1

    def test_default_criterion_shapes(self):
        contract = inject_defaults(build())

        structure = contract.criterion(AC_DEFAULT_STRUCTURE)
        assert structure.severity == Severity.MUST
        assert structure.rule.required_sections == DEFAULT_REQUIRED_SECTIONS

        traceability = contract.criterion(AC_DEFAULT_TRACEABILITY)
        assert traceability.severity == Severity.SHOULD
        assert traceability.rule.min_citation_coverage == 0.6
        assert traceability.rule.citation_pattern == DEFAULT_CITATION_PATTERN

        consistency = contract.criterion(AC_DEFAULT_CONSISTENCY)
        assert consistency.type == CriterionType.CONSISTENCY
        assert consistency.evidence.evidence_type == EvidenceKind.AI_JUDGED

        provenance = contract.criterion(AC_DEFAULT_PROVENANCE)
        assert provenance.severity == Severity.MUST
        assert provenance.evidence.produced_artifact == f"E-{AC_DEFAULT_PROVENANCE}"

    def test_provenance_default_uses_policy(self):
        contract = inject_defaults(
            build(provenancePolicy={"require": ["inputs.enumerated", "tooling.recorded"]})
        )
        rule = contract.criterion(AC_DEFAULT_PROVENANCE).rule
        assert [r.value for r in rule.require] == ["inputs.enumerated", "tooling.recorded"]

    def test_custom_citation_pattern(self):
        contract = inject_defaults(build(), citation_pattern=r"\[\d+\]")
        assert contract.criterion(AC_DEFAULT_TRACEABILITY).rule.citation_pattern == r"\[\d+\]"

    def test_default_rubrics_pass_at_four(self):
        assert all(r.pass_threshold == 4 for r in default_rubrics())


class TestTargetSelection:
    """Tests for how default criteria pick their target artifacts."""

    def test_specification_artifacts_by_kind(self):
        contract = build(
            artifacts=[make_artifact("A-NOTES"), make_artifact("A-SPEC", kind="spec")]
        )
        assert find_specification_artifacts(contract) == ["A-SPEC"]

    def test_specification_falls_back_to_first_required(self):
        contract = build(
            artifacts=[make_artifact("A-OPT", required=False), make_artifact("A-MAIN")]
        )
        assert find_specification_artifacts(contract) == ["A-MAIN"]

    def test_fallback_uses_first_artifact_when_none_required(self):
        contract = build(
            artifacts=[make_artifact("A-1", required=False), make_artifact("A-2", required=False)]
        )
        assert fallback_targets(contract) == ["A-1"]

    def test_narrative_artifacts_prefer_text_formats(self):
        contract = build(
            artifacts=[
                make_artifact(
                    "A-DATA", formats=[{"mediaType": "application/json", "uri": "d.json"}]
                ),
                make_artifact("A-DOC"),
            ]
        )
        assert find_narrative_artifacts(contract) == ["A-DOC"]

    def test_narrative_artifacts_fall_back_to_required(self):
        contract = build(
            artifacts=[
                make_artifact(
                    "A-DATA", formats=[{"mediaType": "application/json", "uri": "d.json"}]
                )
            ]
        )
        assert find_narrative_artifacts(contract) == ["A-DATA"]

    def test_packaged_artifacts(self):
        contract = build(
            artifacts=[make_artifact("A-1"), make_artifact("A-2")],
            packaging=[{"packageId": "P", "inputs": ["A-2"]}],
        )
        assert find_packaged_artifacts(contract) == ["A-2"]

    def test_packaged_artifacts_fall_back(self):
        contract = build(artifacts=[make_artifact("A-1"), make_artifact("A-2")])
        assert find_packaged_artifacts(contract) == ["A-1"]
