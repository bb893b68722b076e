"""Typed results of importing one document, and their per-phase aggregate."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ImportStatus(str, Enum):
    SKIPPED = "skipped"
    REJECTED = "rejected"
    SAVED = "saved"
    # Merged in memory, but the file could not be written.
    SAVE_FAILED = "save_failed"


@dataclass(frozen=True)
class ImportOutcome:
    service: str
    doc_type: str
    url: str
    status: ImportStatus
    reason: Optional[str] = None


@dataclass
class ImportReport:
    phase: str
    counts: Counter = field(default_factory=Counter)
    problems: List[ImportOutcome] = field(default_factory=list)

    def record(self, outcome: ImportOutcome) -> None:
        self.counts[outcome.status] += 1
        if outcome.status in (ImportStatus.REJECTED, ImportStatus.SAVE_FAILED):
            self.problems.append(outcome)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def summary(self) -> str:
        parts = [f"{s.value}={self.counts.get(s, 0)}" for s in ImportStatus]
        return f"[{self.phase}] total={self.total} " + " ".join(parts)
