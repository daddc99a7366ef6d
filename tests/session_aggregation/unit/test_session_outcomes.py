"""Session outcome predicate tests."""

from __future__ import annotations

import json

from unused_cards_report.configuration.runtime_settings import EventFields
from unused_cards_report.log_ingestion import LogEvent, parse_log_line
from unused_cards_report.session_aggregation import (
    OutcomeSignals,
    SessionOutcome,
    session_outcome,
    session_reported_failure,
    session_signals_success,
    signals_failure,
    signals_success,
)

SIGNALS = OutcomeSignals.from_fields(EventFields())


def _event(msg: str, **payload) -> LogEvent:
    record = parse_log_line(json.dumps({"runId": "S", "msg": msg, **payload}) + "\n", 1)
    assert isinstance(record, LogEvent)
    return record


def test_signals_are_built_from_event_fields() -> None:
    assert SIGNALS == OutcomeSignals(
        success_message="Response from payOnLandingPagePnm",
        success_flag_field="isSuccess",
        failure_message="Error while making Requests",
    )


def test_success_requires_message_and_truthy_flag() -> None:
    assert signals_success(_event("Response from payOnLandingPagePnm", isSuccess=True), SIGNALS)
    assert not signals_success(_event("Response from payOnLandingPagePnm"), SIGNALS)
    assert not signals_success(
        _event("Response from payOnLandingPagePnm", isSuccess=False), SIGNALS
    )
    assert not signals_success(_event("Response from processCard", isSuccess=True), SIGNALS)


def test_failure_covers_error_message_and_negative_payment_response() -> None:
    assert signals_failure(_event("Error while making Requests"), SIGNALS)
    assert signals_failure(_event("Response from payOnLandingPagePnm", isSuccess=False), SIGNALS)
    assert not signals_failure(_event("Response from payOnLandingPagePnm"), SIGNALS)


def test_session_predicates() -> None:
    session = [
        _event("Card stored to use"),
        _event("Error while making Requests"),
        _event("Response from payOnLandingPagePnm", isSuccess=True),
    ]

    assert session_reported_failure(session, SIGNALS)
    assert session_signals_success(session, SIGNALS)
    assert not session_signals_success(session[:2], SIGNALS)


def test_session_outcome_first_terminal_event_wins() -> None:
    failed_first = [
        _event("Error while making Requests"),
        _event("Response from payOnLandingPagePnm", isSuccess=True),
    ]
    succeeded_first = list(reversed(failed_first))

    assert session_outcome(failed_first, SIGNALS) == SessionOutcome.FAILED
    assert session_outcome(succeeded_first, SIGNALS) == SessionOutcome.SUCCEEDED
    assert session_outcome([_event("start")], SIGNALS) == SessionOutcome.UNKNOWN
