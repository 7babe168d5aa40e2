"""
Completion Contract v1 Artifact Schema.

Represents a required or optional output unit a run must produce.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .enums import QualityLevel
from .primitives import CONTRACT_MODEL_CONFIG, ArtifactFormat


class Artifact(BaseModel):
    """A deliverable tracked by the contract.

    Invariants (checked by the integrity pass, not by the model):
    - artifact_id MUST be present and unique within the contract.
    - formats MUST contain at least one entry.
    - depends_on entries MUST resolve to declared artifacts. Cycles are allowed.
    - owners SHOULD be non-empty.
    """

    model_config = CONTRACT_MODEL_CONFIG

    artifact_id: Optional[str] = Field(
        None, description="Unique artifact identifier"
    )
    kind: str = Field(default="document", description="Artifact kind")
    subtype: Optional[str] = Field(None, description="Optional kind refinement")
    description: str = Field(default="", description="What the artifact is")
    formats: List[ArtifactFormat] = Field(
        default_factory=list, description="Media type and location pairs"
    )
    required: bool = Field(default=True, description="Must be produced")
    depends_on: List[str] = Field(
        default_factory=list, description="Artifact ids this one depends on"
    )
    owners: List[str] = Field(
        default_factory=list, description="Owner roles (e.g., 'role:author')"
    )
    quality_level: QualityLevel = Field(default=QualityLevel.DRAFT)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def text_format(self) -> Optional[ArtifactFormat]:
        """Return the best format to read as text: first text/* one, else the first."""
        for fmt in self.formats:
            if fmt.media_type.startswith("text/"):
                return fmt
        return self.formats[0] if self.formats else None

    @property
    def is_narrative(self) -> bool:
        return any(fmt.is_text for fmt in self.formats)

    @property
    def looks_like_specification(self) -> bool:
        kind = (self.kind or "").lower()
        subtype = (self.subtype or "").lower()
        return "spec" in kind or "requirements" in subtype or "protocol" in subtype
