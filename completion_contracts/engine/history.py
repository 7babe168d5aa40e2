"""Append-only run history owned by the convergence engine."""
from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from ..contract.results import IterationSnapshot


class RunHistory:
    """Ordered per-iteration snapshots of one run."""

    def __init__(self) -> None:
        self._snapshots: List[IterationSnapshot] = []

    def append(self, snapshot: IterationSnapshot) -> None:
        """Append the next snapshot.

        Raises:
            ValueError: If the snapshot is not the next iteration in sequence
        """
        expected = len(self._snapshots) + 1
        if snapshot.iteration != expected:
            raise ValueError(
                f"Expected iteration {expected}, got {snapshot.iteration}"
            )
        self._snapshots.append(snapshot)

    @property
    def snapshots(self) -> Tuple[IterationSnapshot, ...]:
        return tuple(self._snapshots)

    @property
    def latest(self) -> Optional[IterationSnapshot]:
        return self._snapshots[-1] if self._snapshots else None

    def failing_must_sets(self) -> List[List[str]]:
        return [list(s.failing_must) for s in self._snapshots]

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[IterationSnapshot]:
        return iter(self.snapshots)
