"""Log stream reader tests."""

from __future__ import annotations

import io
import json
import logging
from datetime import UTC, datetime
from pathlib import Path

import pytest
from unused_cards_report.configuration.runtime_settings import EventFields
from unused_cards_report.log_ingestion import (
    LogEvent,
    LogParseError,
    iter_log_records,
    parse_event_time,
    parse_log_line,
)


def _line(**payload) -> str:
    return json.dumps(payload) + "\n"


def test_parse_log_line_decodes_session_time_and_message() -> None:
    record = parse_log_line(
        _line(runId="S1", time="2024-03-01T10:00:00.250Z", msg="Card stored to use", orderId=7),
        12,
    )

    assert isinstance(record, LogEvent)
    assert record.line_number == 12
    assert record.session_id == "S1"
    assert record.time == datetime(2024, 3, 1, 10, 0, 0, 250_000, tzinfo=UTC)
    assert record.message == "Card stored to use"
    assert record.payload["orderId"] == 7
    assert not record.raw.endswith("\n")


def test_parse_log_line_uses_configured_field_names() -> None:
    fields = EventFields(session_field="sid", time_field="ts", message_field="text")

    record = parse_log_line(_line(sid=42, ts=1_000, text="hello"), 1, fields)

    assert isinstance(record, LogEvent)
    assert record.session_id == "42"
    assert record.time == datetime(1970, 1, 1, 0, 0, 1, tzinfo=UTC)
    assert record.message == "hello"


@pytest.mark.parametrize(
    ("raw_line", "reason"),
    [
        ("{not json\n", "invalid JSON"),
        ("[1, 2, 3]\n", "not a JSON object"),
        ('"text"\n', "not a JSON object"),
    ],
)
def test_malformed_lines_become_parse_errors(raw_line: str, reason: str) -> None:
    record = parse_log_line(raw_line, 3)

    assert isinstance(record, LogParseError)
    assert record.line_number == 3
    assert reason in record.reason
    assert record.terminated is True


def test_unterminated_line_is_marked() -> None:
    record = parse_log_line('{"runId": "S1", "msg": "trunc', 9)

    assert isinstance(record, LogParseError)
    assert record.terminated is False


def test_missing_fields_default_to_none_and_empty_message() -> None:
    record = parse_log_line(_line(level="info"), 1)

    assert isinstance(record, LogEvent)
    assert record.session_id is None
    assert record.time is None
    assert record.message == ""


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2024-01-01T00:00:00", datetime(2024, 1, 1, tzinfo=UTC)),
        ("2024-01-01T02:00:00+02:00", datetime(2024, 1, 1, tzinfo=UTC)),
        (1_704_067_200_000, datetime(2024, 1, 1, tzinfo=UTC)),
        ("yesterday", None),
        (True, None),
        (None, None),
    ],
)
def test_parse_event_time(value, expected) -> None:
    assert parse_event_time(value) == expected


def test_iter_log_records_skips_blank_lines_and_continues_after_errors(caplog) -> None:
    stream = io.StringIO(
        _line(runId="S1", msg="a") + "\n" + "garbage\n" + _line(runId="S2", msg="b")
    )

    with caplog.at_level(logging.WARNING):
        records = list(iter_log_records(stream))

    assert [type(record) for record in records] == [LogEvent, LogParseError, LogEvent]
    assert [record.line_number for record in records] == [1, 3, 4]
    assert "line 3 skipped" in caplog.text


def test_iter_log_records_restarts_from_first_line(tmp_path: Path) -> None:
    log_path = tmp_path / "merged.log"
    log_path.write_text(_line(runId="S1", msg="a") + _line(runId="S2", msg="b"), encoding="utf-8")

    first = [record.session_id for record in iter_log_records(log_path)]
    second = [record.session_id for record in iter_log_records(str(log_path))]

    assert first == second == ["S1", "S2"]


def test_iter_log_records_reports_progress(caplog) -> None:
    stream = io.StringIO("".join(_line(runId=f"S{index}", msg="m") for index in range(5)))

    with caplog.at_level(logging.INFO):
        list(iter_log_records(stream, progress_every=2, label="merged"))

    assert "[merged] line 2..." in caplog.text
    assert "[merged] line 4..." in caplog.text
    assert "memory usage: rss=" in caplog.text
