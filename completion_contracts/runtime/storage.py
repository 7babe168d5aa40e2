"""
Artifact storage abstraction.

file://   local filesystem, sandboxed to a root directory
memory:// process-local store (tests, dry runs)

Locations are opaque strings; each store decides how to resolve them.
"""
from __future__ import annotations

import hashlib
import json
import logging
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

EVENTS_LOCATION = "events.jsonl"


class ArtifactReadError(Exception):
    """Raised when a location is missing or cannot be read."""

    def __init__(self, location: str, reason: str):
        self.location = location
        self.reason = reason
        super().__init__(f"Cannot read artifact at {location}: {reason}")


class ArtifactStore(ABC):
    """Abstract base class for artifact storage."""

    @abstractmethod
    def exists(self, location: str) -> bool:
        """Return True if something is stored at the location."""
        pass

    @abstractmethod
    def read_text(self, location: str) -> str:
        """Read text content. Raises ArtifactReadError if unavailable."""
        pass

    @abstractmethod
    def write_text(self, location: str, content: str) -> None:
        """Write text content, replacing any previous content."""
        pass

    @abstractmethod
    def append_line(self, location: str, line: str) -> None:
        """Append a line to a text record (for logs)."""
        pass

    @abstractmethod
    def get_uri(self) -> str:
        """Get the full URI of this store."""
        pass

    def write_json(self, location: str, data: Dict[str, Any]) -> None:
        """Write JSON data to a location."""
        self.write_text(location, json.dumps(data, indent=2, default=str))

    def append_event(self, event: Dict[str, Any]) -> None:
        """Append a structured event to events.jsonl."""
        if "timestamp" not in event:
            event["timestamp"] = datetime.now(timezone.utc).isoformat()
        self.append_line(EVENTS_LOCATION, json.dumps(event, default=str))

    def hash(self, location: str) -> str:
        """Return the sha256 hex digest of the content at a location."""
        return sha256_text(self.read_text(location))


def sha256_text(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class FileArtifactStore(ArtifactStore):
    """Local filesystem store (file:// URIs).

    Every location resolves under ``root``. Relative locations are joined to
    the root; absolute paths and file:// URIs are accepted only if they point
    inside it.

    Structure:
        {root}/
        ├── <artifact files>    # Read by validators
        ├── events.jsonl        # Structured run events
        └── evidence/           # One record per criterion + verdict.json
    """

    def __init__(self, root: Union[str, Path]):
        """Initialize with the root directory of the workspace.

        Args:
            root: Directory all locations resolve under (created if missing)
        """
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.debug(f"File artifact store rooted at {self.root}")

    def _resolve(self, location: str) -> Path:
        if location.startswith("file://"):
            parsed = urlparse(location)
            location = parsed.netloc + parsed.path
        candidate = Path(location)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = candidate.resolve()
        if resolved != self.root and self.root not in resolved.parents:
            raise ValueError(
                f"Location {location!r} escapes store root {self.root}"
            )
        return resolved

    def exists(self, location: str) -> bool:
        return self._resolve(location).is_file()

    def read_text(self, location: str) -> str:
        path = self._resolve(location)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise ArtifactReadError(location, "not found") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ArtifactReadError(location, str(e)) from e

    def write_text(self, location: str, content: str) -> None:
        path = self._resolve(location)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def append_line(self, location: str, line: str) -> None:
        path = self._resolve(location)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")

    def get_uri(self) -> str:
        return f"file://{self.root}"


class InMemoryArtifactStore(ArtifactStore):
    """Thread-safe in-process store keyed by location string."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, name: str = "default"):
        self.name = name
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def exists(self, location: str) -> bool:
        with self._lock:
            return location in self._data

    def read_text(self, location: str) -> str:
        with self._lock:
            if location not in self._data:
                raise ArtifactReadError(location, "not found")
            return self._data[location]

    def write_text(self, location: str, content: str) -> None:
        with self._lock:
            self._data[location] = content

    def append_line(self, location: str, line: str) -> None:
        with self._lock:
            self._data[location] = self._data.get(location, "") + line + "\n"

    def get_uri(self) -> str:
        return f"memory://{self.name}"

    def snapshot(self) -> Dict[str, str]:
        """Copy of everything stored, for assertions."""
        with self._lock:
            return dict(self._data)


def create_artifact_store(uri: str) -> ArtifactStore:
    """Factory function to create the appropriate ArtifactStore from a URI.

    Args:
        uri: Store URI (e.g., "file:///srv/workspace", "file://./workspace"
            or "memory://scratch")

    Returns:
        ArtifactStore instance for the given URI scheme

    Raises:
        ValueError: If URI scheme is not supported
    """
    parsed = urlparse(uri)

    if parsed.scheme == "file":
        # file://./workspace keeps its relative path in netloc
        return FileArtifactStore(Path(parsed.netloc + parsed.path))

    elif parsed.scheme == "memory":
        return InMemoryArtifactStore(name=parsed.netloc or "default")

    else:
        raise ValueError(
            f"Unsupported storage scheme: {parsed.scheme!r}. "
            f"Supported: file://, memory://"
        )
