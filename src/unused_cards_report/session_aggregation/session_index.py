"""Two-pass session grouping over the event log."""

from __future__ import annotations

import logging
from collections.abc import Callable, Collection, Iterable, Iterator

from unused_cards_report.log_ingestion.log_events import LogEvent, LogParseError, LogRecord

logger = logging.getLogger(__name__)

EventPredicate = Callable[[LogEvent], bool]


class TruncatedLogError(Exception):
    """Raised when the log ends in the middle of a line."""

    def __init__(self, line_number: int) -> None:
        super().__init__(
            f"Log ends with an incomplete line at line {line_number}; "
            "refusing to treat a short read as a complete pass."
        )
        self.line_number = line_number


def message_in(tags: Collection[str]) -> EventPredicate:
    """Predicate matching events whose message is one of `tags`."""
    accepted = frozenset(tags)

    def _predicate(event: LogEvent) -> bool:
        return event.message in accepted

    return _predicate


def any_event(_event: LogEvent) -> bool:
    """Predicate accepting every event."""
    return True


def derive_interest_set(records: Iterable[LogRecord], predicate: EventPredicate) -> set[str]:
    """First pass: ids of sessions with at least one event satisfying `predicate`."""
    interest_set: set[str] = set()
    for event in iter_session_events(records):
        if event.session_id not in interest_set and predicate(event):
            interest_set.add(event.session_id)  # type: ignore[arg-type]
    logger.info("Interest set holds %d sessions.", len(interest_set))
    return interest_set


def collect_events(
    records: Iterable[LogRecord], interest_set: Collection[str] | None = None
) -> dict[str, list[LogEvent]]:
    """Second pass: map session id to its events in file order.

    Only sessions in `interest_set` are retained; `None` retains every session.
    """
    sessions: dict[str, list[LogEvent]] = {}
    for event in _iter_interesting(records, interest_set):
        sessions.setdefault(event.session_id, []).append(event)  # type: ignore[arg-type]
    logger.info("Collected events for %d sessions.", len(sessions))
    return sessions


def collect_event_stream(
    records: Iterable[LogRecord], interest_set: Collection[str] | None = None
) -> list[LogEvent]:
    """Chronological event list restricted to `interest_set`."""
    events = list(_iter_interesting(records, interest_set))
    logger.info("Collected %d events.", len(events))
    return events


def group_by_session(events: Iterable[LogEvent]) -> dict[str, list[LogEvent]]:
    """Group already collected events by session id, preserving order."""
    sessions: dict[str, list[LogEvent]] = {}
    for event in events:
        if event.session_id is not None:
            sessions.setdefault(event.session_id, []).append(event)
    return sessions


def iter_session_events(records: Iterable[LogRecord]) -> Iterator[LogEvent]:
    """Yield events carrying a session id, halting on a truncated final line."""
    for record in records:
        if isinstance(record, LogParseError):
            if not record.terminated:
                raise TruncatedLogError(record.line_number)
            continue
        if record.session_id is not None:
            yield record


def _iter_interesting(
    records: Iterable[LogRecord], interest_set: Collection[str] | None
) -> Iterator[LogEvent]:
    for event in iter_session_events(records):
        if interest_set is None or event.session_id in interest_set:
            yield event
