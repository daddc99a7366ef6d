"""Session-level outcome predicates."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from unused_cards_report.configuration.runtime_settings import EventFields
from unused_cards_report.log_ingestion.log_events import LogEvent


class SessionOutcome(str, Enum):
    """Authoritative result of one processing attempt."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class OutcomeSignals:
    """Message tags that mark terminal success or failure."""

    success_message: str
    success_flag_field: str
    failure_message: str

    @staticmethod
    def from_fields(fields: EventFields) -> OutcomeSignals:
        return OutcomeSignals(
            success_message=fields.success_message,
            success_flag_field=fields.success_flag_field,
            failure_message=fields.failure_message,
        )


def signals_success(event: LogEvent, signals: OutcomeSignals) -> bool:
    """True when the event is a payment response flagged successful."""
    return event.message == signals.success_message and bool(
        event.payload.get(signals.success_flag_field)
    )


def signals_failure(event: LogEvent, signals: OutcomeSignals) -> bool:
    """True for the failure message or a payment response flagged unsuccessful."""
    if event.message == signals.failure_message:
        return True
    return (
        event.message == signals.success_message
        and signals.success_flag_field in event.payload
        and not event.payload.get(signals.success_flag_field)
    )


def session_signals_success(events: Iterable[LogEvent], signals: OutcomeSignals) -> bool:
    """True when any event of the session reports a successful payment."""
    return any(signals_success(event, signals) for event in events)


def session_reported_failure(events: Iterable[LogEvent], signals: OutcomeSignals) -> bool:
    """True when the session logged the pipeline failure message."""
    return any(event.message == signals.failure_message for event in events)


def session_outcome(events: Iterable[LogEvent], signals: OutcomeSignals) -> SessionOutcome:
    """Return the outcome of the first terminal event; later terminal events are ignored."""
    for event in events:
        if signals_success(event, signals):
            return SessionOutcome.SUCCEEDED
        if signals_failure(event, signals):
            return SessionOutcome.FAILED
    return SessionOutcome.UNKNOWN
