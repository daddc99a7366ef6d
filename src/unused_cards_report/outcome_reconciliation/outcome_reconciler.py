"""Forward-scan reconciliation of candidates against later sessions."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from unused_cards_report.candidate_extraction.candidate_models import Candidate
from unused_cards_report.log_ingestion.log_events import LogEvent
from unused_cards_report.session_aggregation.session_index import group_by_session
from unused_cards_report.session_aggregation.session_outcomes import (
    OutcomeSignals,
    session_signals_success,
)

from .reconciliation_outcomes import ReconciliationResult
from .snapshot_matchers import FieldEqualityMatcher, SnapshotMatcher

logger = logging.getLogger(__name__)


class ConsistencyViolationError(Exception):
    """Raised when a candidate's origin session is missing from the event stream."""


def reconcile_candidates(
    events: Sequence[LogEvent],
    candidates: Iterable[Candidate],
    *,
    signals: OutcomeSignals,
    matcher: SnapshotMatcher | None = None,
    progress_every: int = 100,
) -> list[ReconciliationResult]:
    """Annotate each candidate with a verdict.

    A candidate is resolved by the earliest later session that references the
    same card number and reports a successful payment.

    Raises:
      ConsistencyViolationError: If a candidate's session has no event in `events`.
    """
    resolved_matcher = matcher or FieldEqualityMatcher()
    first_index = _first_index_by_session(events)
    sessions = group_by_session(events)
    candidate_list = list(candidates)
    total = len(candidate_list)

    results: list[ReconciliationResult] = []
    for position, candidate in enumerate(candidate_list, start=1):
        if progress_every > 0 and position % progress_every == 0:
            logger.info("Evaluating candidate %d of %d...", position, total)
        result = reconcile_candidate(
            events,
            candidate,
            first_index=first_index,
            sessions=sessions,
            signals=signals,
            matcher=resolved_matcher,
        )
        if not result.is_unresolved:
            logger.info(
                "Card %s (%d of %d) was successfully used later in session %s.",
                candidate.masked_card_number,
                position,
                total,
                result.resolved_by,
            )
        results.append(result)
    return results


def reconcile_candidate(
    events: Sequence[LogEvent],
    candidate: Candidate,
    *,
    first_index: Mapping[str, int],
    sessions: Mapping[str, Sequence[LogEvent]],
    signals: OutcomeSignals,
    matcher: SnapshotMatcher,
) -> ReconciliationResult:
    """Scan forward from the candidate's origin session for a successful reuse."""
    origin_index = first_index.get(candidate.session_id)
    if origin_index is None:
        raise ConsistencyViolationError(
            f"Session {candidate.session_id} of card {candidate.masked_card_number} "
            "does not appear in the collected events."
        )

    evaluated_sessions = {candidate.session_id}
    for index in range(origin_index + 1, len(events)):
        event = events[index]
        session_id = event.session_id
        if session_id is None or session_id in evaluated_sessions:
            continue
        if not matcher.matches(event, candidate.card_number):
            continue
        if session_signals_success(sessions.get(session_id, ()), signals):
            return ReconciliationResult.reused(candidate, session_id)
        evaluated_sessions.add(session_id)
    return ReconciliationResult.unresolved(candidate)


def _first_index_by_session(events: Sequence[LogEvent]) -> dict[str, int]:
    first_index: dict[str, int] = {}
    for index, event in enumerate(events):
        if event.session_id is not None:
            first_index.setdefault(event.session_id, index)
    return first_index
