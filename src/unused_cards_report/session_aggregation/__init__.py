"""Session aggregation domain exports."""

from .session_index import (
    EventPredicate,
    TruncatedLogError,
    any_event,
    collect_event_stream,
    collect_events,
    derive_interest_set,
    group_by_session,
    iter_session_events,
    message_in,
)
from .session_outcomes import (
    OutcomeSignals,
    SessionOutcome,
    session_outcome,
    session_reported_failure,
    session_signals_success,
    signals_failure,
    signals_success,
)

__all__ = [
    "EventPredicate",
    "OutcomeSignals",
    "SessionOutcome",
    "TruncatedLogError",
    "any_event",
    "collect_event_stream",
    "collect_events",
    "derive_interest_set",
    "group_by_session",
    "iter_session_events",
    "message_in",
    "session_outcome",
    "session_reported_failure",
    "session_signals_success",
    "signals_failure",
    "signals_success",
]
