"""Ordered, append-only log of the decisions confirmed in one attempt."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple


@dataclass(frozen=True)
class PathEntry:
    step_id: str
    option_id: str
    score: int

    def to_dict(self) -> dict:
        return {"step_id": self.step_id, "option_id": self.option_id, "score": self.score}


@dataclass(frozen=True)
class PathRecorder:
    """Persistent append-only path.

    `append` returns a new recorder; existing recorders (and therefore
    earlier attempt states) are never mutated or reordered.
    """

    entries: Tuple[PathEntry, ...] = ()

    def append(self, entry: PathEntry) -> "PathRecorder":
        return PathRecorder(self.entries + (entry,))

    def visited_step_ids(self) -> List[str]:
        return [e.step_id for e in self.entries]

    def has_visited(self, step_id: str) -> bool:
        return any(e.step_id == step_id for e in self.entries)

    @property
    def last(self) -> PathEntry | None:
        return self.entries[-1] if self.entries else None

    def __iter__(self) -> Iterator[PathEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
