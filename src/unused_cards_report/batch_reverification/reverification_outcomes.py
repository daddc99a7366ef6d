"""Batch re-verification entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from unused_cards_report.candidate_extraction.candidate_models import Candidate


class ReverificationState(str, Enum):
    """Terminal state of one candidate in a re-verification batch."""

    VERIFIED_UNRESOLVED = "verified_unresolved"
    VERIFIED_RESOLVED = "verified_resolved"
    SKIPPED_BY_CHECKPOINT = "skipped_by_checkpoint"
    FLAGGED_FOR_REVIEW = "flagged_for_review"


@dataclass(frozen=True)
class Checkpoint:
    """Progress of an earlier batch: indices below `processed_up_to` are decided."""

    processed_up_to: int = 0
    excluded_keys: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class ReverificationResult:
    """Outcome for the candidate at `index` of the input list."""

    index: int
    candidate: Candidate
    state: ReverificationState
    retained: bool
    resolved_by: str | None = None
    detail: str | None = None


@dataclass(frozen=True)
class BatchOutcome:
    """All per-candidate results plus the checkpoint reached."""

    results: tuple[ReverificationResult, ...]
    checkpoint: Checkpoint

    @property
    def retained_candidates(self) -> list[Candidate]:
        return [result.candidate for result in self.results if result.retained]

    def count(self, state: ReverificationState) -> int:
        return sum(1 for result in self.results if result.state == state)
