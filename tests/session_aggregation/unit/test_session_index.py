"""Session aggregation tests."""

from __future__ import annotations

import json

import pytest
from unused_cards_report.log_ingestion import LogRecord, parse_log_line
from unused_cards_report.session_aggregation import (
    TruncatedLogError,
    any_event,
    collect_event_stream,
    collect_events,
    derive_interest_set,
    group_by_session,
    message_in,
)


def _records(*payloads: dict) -> list[LogRecord]:
    return [
        parse_log_line(json.dumps(payload) + "\n", line_number)
        for line_number, payload in enumerate(payloads, start=1)
    ]


_LOG = (
    {"runId": "A", "msg": "start"},
    {"runId": "B", "msg": "Card stored to use"},
    {"msg": "heartbeat"},
    {"runId": "A", "msg": "Response from processCard"},
    {"runId": "C", "msg": "start"},
    {"runId": "B", "msg": "Error while making Requests"},
)


def test_derive_interest_set_keeps_sessions_with_matching_event() -> None:
    predicate = message_in(("Response from processCard", "Card stored to use"))

    assert derive_interest_set(_records(*_LOG), predicate) == {"A", "B"}


def test_any_event_accepts_every_session() -> None:
    assert derive_interest_set(_records(*_LOG), any_event) == {"A", "B", "C"}


def test_collect_events_preserves_file_order_per_session() -> None:
    sessions = collect_events(_records(*_LOG), {"A", "B"})

    assert list(sessions) == ["A", "B"]
    assert [event.message for event in sessions["A"]] == ["start", "Response from processCard"]
    assert [event.line_number for event in sessions["B"]] == [2, 6]


def test_collect_events_without_interest_set_retains_every_session() -> None:
    sessions = collect_events(_records(*_LOG), None)

    assert set(sessions) == {"A", "B", "C"}


def test_collect_event_stream_is_restricted_and_ordered() -> None:
    events = collect_event_stream(_records(*_LOG), {"B", "C"})

    assert [event.line_number for event in events] == [2, 5, 6]


def test_group_by_session_matches_collect_events() -> None:
    records = _records(*_LOG)

    assert group_by_session(collect_event_stream(records)) == collect_events(records)


def test_aggregation_is_deterministic() -> None:
    predicate = message_in(("start",))

    assert derive_interest_set(_records(*_LOG), predicate) == derive_interest_set(
        _records(*_LOG), predicate
    )


def test_mid_file_parse_errors_are_skipped() -> None:
    records = _records(*_LOG)
    records.insert(2, parse_log_line("{broken\n", 99))

    assert set(collect_events(records)) == {"A", "B", "C"}


def test_unterminated_final_line_halts_aggregation() -> None:
    records = _records(*_LOG)
    records.append(parse_log_line('{"runId": "D", "msg": "cut', 7))

    with pytest.raises(TruncatedLogError) as excinfo:
        collect_events(records)

    assert excinfo.value.line_number == 7
