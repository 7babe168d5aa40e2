"""Runtime collaborators: artifact storage and the execution context."""

from .context import (
    AiJudge,
    ExecutionContext,
    JudgeScore,
    ProvenanceSignals,
    TeamMember,
    new_run_id,
)
from .storage import (
    ArtifactReadError,
    ArtifactStore,
    FileArtifactStore,
    InMemoryArtifactStore,
    create_artifact_store,
    sha256_text,
)

__all__ = [
    "AiJudge",
    "ExecutionContext",
    "JudgeScore",
    "ProvenanceSignals",
    "TeamMember",
    "new_run_id",
    "ArtifactReadError",
    "ArtifactStore",
    "FileArtifactStore",
    "InMemoryArtifactStore",
    "create_artifact_store",
    "sha256_text",
]
