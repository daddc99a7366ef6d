"""Reconciliation domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from unused_cards_report.candidate_extraction.candidate_models import Candidate


class Verdict(str, Enum):
    """Whether a candidate stays in the report."""

    UNRESOLVED = "unresolved"
    RESOLVED = "resolved"


class ResolutionReason(str, Enum):
    """Why a candidate was excluded."""

    REUSED_SUCCESSFULLY = "reused_successfully"
    SETTLED_EXTERNALLY = "settled_externally"


@dataclass(frozen=True)
class ReconciliationResult:
    """A candidate annotated with its verdict."""

    candidate: Candidate
    verdict: Verdict
    reason: ResolutionReason | None = None
    resolved_by: str | None = None

    @property
    def is_unresolved(self) -> bool:
        return self.verdict == Verdict.UNRESOLVED

    @staticmethod
    def unresolved(candidate: Candidate) -> ReconciliationResult:
        return ReconciliationResult(candidate=candidate, verdict=Verdict.UNRESOLVED)

    @staticmethod
    def reused(candidate: Candidate, session_id: str) -> ReconciliationResult:
        return ReconciliationResult(
            candidate=candidate,
            verdict=Verdict.RESOLVED,
            reason=ResolutionReason.REUSED_SUCCESSFULLY,
            resolved_by=session_id,
        )

    @staticmethod
    def settled(candidate: Candidate, ledger_key: str) -> ReconciliationResult:
        return ReconciliationResult(
            candidate=candidate,
            verdict=Verdict.RESOLVED,
            reason=ResolutionReason.SETTLED_EXTERNALLY,
            resolved_by=ledger_key,
        )
