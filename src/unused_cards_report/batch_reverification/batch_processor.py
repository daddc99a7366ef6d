"""Resumable, bounded-concurrency re-verification of unresolved candidates."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from unused_cards_report.candidate_extraction.candidate_models import Candidate
from unused_cards_report.configuration.runtime_settings import EventFields
from unused_cards_report.log_ingestion.log_events import LogEvent
from unused_cards_report.outcome_reconciliation.snapshot_matchers import (
    FieldEqualityMatcher,
    SnapshotMatcher,
)
from unused_cards_report.session_aggregation.session_index import group_by_session
from unused_cards_report.session_aggregation.session_outcomes import (
    OutcomeSignals,
    session_signals_success,
)

from .log_search import LogSearch, LogSearchError, parse_found_lines
from .reverification_outcomes import (
    BatchOutcome,
    Checkpoint,
    ReverificationResult,
    ReverificationState,
)
from .wave_runner import run_in_waves

logger = logging.getLogger(__name__)

_DEFAULT_FIELDS = EventFields()

WaveCallback = Callable[[Checkpoint], None]


@dataclass(frozen=True)
class KeyRule:
    """Shape a card number must have before it is searched for."""

    min_length: int = 13
    max_length: int = 19

    def violation(self, key: str) -> str | None:
        if not key.isdigit():
            return f"card number {key!r} is not purely numeric"
        if not self.min_length <= len(key) <= self.max_length:
            return (
                f"card number length {len(key)} is outside "
                f"{self.min_length}..{self.max_length}"
            )
        return None


@dataclass(frozen=True)
class _Verification:
    state: ReverificationState
    resolved_by: str | None = None
    detail: str | None = None


def reverify_candidates(
    candidates: Sequence[Candidate],
    search: LogSearch,
    *,
    signals: OutcomeSignals,
    parallelism: int = 20,
    checkpoint: Checkpoint | None = None,
    key_rule: KeyRule | None = None,
    matcher: SnapshotMatcher | None = None,
    fields: EventFields = _DEFAULT_FIELDS,
    on_wave_complete: WaveCallback | None = None,
) -> BatchOutcome:
    """Re-check every candidate against the log using targeted searches.

    Indices below `checkpoint.processed_up_to` are decided from the checkpoint
    without any search. The remaining candidates are processed in waves of
    `parallelism`; after each wave the advanced checkpoint is handed to
    `on_wave_complete` so the caller can persist it.

    A `LogSearchError` in one unit flags that candidate for review and is
    retained. Any other exception aborts the batch.
    """
    start = checkpoint or Checkpoint()
    rule = key_rule or KeyRule()
    resolved_matcher = matcher or FieldEqualityMatcher()
    total = len(candidates)
    processed_up_to = min(start.processed_up_to, total)
    excluded_keys = set(start.excluded_keys)

    results: list[ReverificationResult] = [
        ReverificationResult(
            index=index,
            candidate=candidates[index],
            state=ReverificationState.SKIPPED_BY_CHECKPOINT,
            retained=candidates[index].card_number not in excluded_keys,
        )
        for index in range(processed_up_to)
    ]
    if processed_up_to:
        logger.info("Resuming after %d candidates decided by the checkpoint.", processed_up_to)

    def _verify(index: int) -> ReverificationResult:
        candidate = candidates[index]
        verification = _verify_unit(
            candidate, search, rule=rule, signals=signals, matcher=resolved_matcher, fields=fields
        )
        return ReverificationResult(
            index=index,
            candidate=candidate,
            state=verification.state,
            retained=verification.state != ReverificationState.VERIFIED_RESOLVED,
            resolved_by=verification.resolved_by,
            detail=verification.detail,
        )

    pending = list(range(processed_up_to, total))
    for wave in run_in_waves(pending, _verify, parallelism=parallelism):
        for result in wave:
            _log_result(result, total)
            if result.state == ReverificationState.VERIFIED_RESOLVED:
                excluded_keys.add(result.candidate.card_number)
        results.extend(wave)
        processed_up_to = wave[-1].index + 1
        if on_wave_complete is not None:
            on_wave_complete(Checkpoint(processed_up_to, frozenset(excluded_keys)))

    return BatchOutcome(
        results=tuple(results),
        checkpoint=Checkpoint(processed_up_to, frozenset(excluded_keys)),
    )


def verify_candidate(
    candidate: Candidate,
    search: LogSearch,
    *,
    signals: OutcomeSignals,
    matcher: SnapshotMatcher | None = None,
    fields: EventFields = _DEFAULT_FIELDS,
) -> str | None:
    """Return the id of a later successful session reusing the card, if any.

    The card number is searched for first. Sessions seen after the candidate's
    own session in that result are then searched for by id and checked for a
    success signal, earliest first.

    Raises:
      LogSearchError: If either search fails.
    """
    resolved_matcher = matcher or FieldEqualityMatcher()
    key_events = [
        event
        for event in parse_found_lines(search.find_lines([candidate.card_number]), fields)
        if resolved_matcher.matches(event, candidate.card_number)
    ]
    later_sessions = _later_session_ids(key_events, candidate)
    if not later_sessions:
        return None

    session_lines = search.find_lines(later_sessions)
    session_events = group_by_session(parse_found_lines(session_lines, fields))
    for session_id in later_sessions:
        if session_signals_success(session_events.get(session_id, ()), signals):
            return session_id
    return None


def _verify_unit(
    candidate: Candidate,
    search: LogSearch,
    *,
    rule: KeyRule,
    signals: OutcomeSignals,
    matcher: SnapshotMatcher,
    fields: EventFields,
) -> _Verification:
    violation = rule.violation(candidate.card_number)
    if violation is not None:
        return _Verification(ReverificationState.FLAGGED_FOR_REVIEW, detail=violation)
    try:
        resolved_by = verify_candidate(
            candidate, search, signals=signals, matcher=matcher, fields=fields
        )
    except LogSearchError as exc:
        return _Verification(ReverificationState.FLAGGED_FOR_REVIEW, detail=str(exc))
    if resolved_by is None:
        return _Verification(ReverificationState.VERIFIED_UNRESOLVED)
    return _Verification(ReverificationState.VERIFIED_RESOLVED, resolved_by=resolved_by)


def _later_session_ids(key_events: Sequence[LogEvent], candidate: Candidate) -> list[str]:
    origin_positions = [
        position
        for position, event in enumerate(key_events)
        if event.session_id == candidate.session_id
    ]
    if origin_positions:
        later: Iterable[LogEvent] = key_events[origin_positions[0] + 1 :]
    else:
        # Origin not in the search result: fall back to time ordering.
        later = [
            event
            for event in key_events
            if event.time is not None and event.time > candidate.timestamp
        ]
    session_ids: dict[str, None] = {}
    for event in later:
        if event.session_id is not None and event.session_id != candidate.session_id:
            session_ids.setdefault(event.session_id, None)
    return list(session_ids)


def _log_result(result: ReverificationResult, total: int) -> None:
    card = result.candidate.masked_card_number
    if result.state == ReverificationState.VERIFIED_RESOLVED:
        logger.info(
            "Card %s (%d of %d) was successfully used later in session %s.",
            card,
            result.index + 1,
            total,
            result.resolved_by,
        )
    elif result.state == ReverificationState.FLAGGED_FOR_REVIEW:
        logger.warning(
            "Card %s (%d of %d) flagged for review: %s",
            card,
            result.index + 1,
            total,
            result.detail,
        )
    else:
        logger.debug("Card %s (%d of %d) remains unresolved.", card, result.index + 1, total)
