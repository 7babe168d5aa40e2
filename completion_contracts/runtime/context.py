"""
Execution context supplied by the caller of the engine.

Carries artifact access, the team roster, an optional provenance snapshot and
an optional AI judge callback. Validators read from it; nothing in the core
mutates it apart from evidence writes through ``artifacts``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from ulid import ULID

from ..contract.enums import ProvenanceRequirement
from .storage import ArtifactStore, InMemoryArtifactStore


def new_run_id() -> str:
    """Generate a lexicographically sortable run id."""
    return f"run-{ULID()}"


@dataclass
class TeamMember:
    """A (role, identifier) pair from the team roster."""
    role: str
    agent_id: str


class JudgeScore(BaseModel):
    """What an AI judge returns for one criterion."""

    score: float
    rationale: str = ""
    model: Optional[str] = None


# (rubric_text, content, pass_threshold, ac_id) -> JudgeScore
AiJudge = Callable[[str, str, float, str], JudgeScore]


class ProvenanceSignals(BaseModel):
    """Boolean provenance flags observed for the current run."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    inputs_enumerated: bool = False
    tooling_recorded: bool = False
    agent_actions_logged: bool = False
    artifact_hashes_recorded: bool = False
    dependencies_recorded: bool = False
    parameters_recorded: bool = False
    attestation_signed: bool = False

    def as_map(self) -> Dict[ProvenanceRequirement, bool]:
        """Map each provenance requirement name to its observed flag."""
        return {
            ProvenanceRequirement.INPUTS_ENUMERATED: self.inputs_enumerated,
            ProvenanceRequirement.TOOLING_RECORDED: self.tooling_recorded,
            ProvenanceRequirement.AGENT_ACTIONS_LOGGED: self.agent_actions_logged,
            ProvenanceRequirement.ARTIFACT_HASHES_RECORDED: self.artifact_hashes_recorded,
            ProvenanceRequirement.DEPENDENCIES_RECORDED: self.dependencies_recorded,
            ProvenanceRequirement.PARAMETERS_RECORDED: self.parameters_recorded,
            ProvenanceRequirement.ATTESTATION_SIGNED: self.attestation_signed,
        }


@dataclass
class ExecutionContext:
    """Everything the engine needs from its caller for one run."""
    artifacts: ArtifactStore = field(default_factory=InMemoryArtifactStore)
    run_id: str = field(default_factory=new_run_id)
    team: List[TeamMember] = field(default_factory=list)
    provenance_signals: Optional[ProvenanceSignals] = None
    ai_judge: Optional[AiJudge] = None
    workspace_root: Optional[str] = None

    def team_roles(self) -> Set[str]:
        return {member.role for member in self.team}
