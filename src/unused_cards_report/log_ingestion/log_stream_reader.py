"""Streaming reader for the line-delimited JSON event log."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

from unused_cards_report.configuration.runtime_settings import EventFields

from .log_events import LogEvent, LogParseError, LogRecord
from .memory_telemetry import log_memory_usage

logger = logging.getLogger(__name__)

_DEFAULT_FIELDS = EventFields()


def iter_log_records(
    source: Path | str | TextIO,
    fields: EventFields = _DEFAULT_FIELDS,
    *,
    progress_every: int = 0,
    label: str = "log",
) -> Iterator[LogRecord]:
    """Yield one `LogEvent` or `LogParseError` per non-blank line of `source`.

    The stream is lazy and forward-only; calling again restarts from line one.
    Malformed lines are reported as `LogParseError` and never stop the stream.
    A positive `progress_every` logs progress and memory usage every N lines.
    """
    if isinstance(source, (str, Path)):
        with open(source, encoding="utf-8", errors="replace") as handle:
            yield from _iter_lines(handle, fields, progress_every, label)
    else:
        yield from _iter_lines(source, fields, progress_every, label)


def parse_log_line(
    raw_line: str, line_number: int, fields: EventFields = _DEFAULT_FIELDS
) -> LogRecord:
    """Decode a single log line."""
    terminated = raw_line.endswith("\n")
    raw = raw_line.rstrip("\r\n")
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError as exc:
        return LogParseError(
            line_number=line_number,
            raw=raw,
            reason=f"invalid JSON: {exc.msg}",
            terminated=terminated,
        )
    if not isinstance(decoded, Mapping):
        return LogParseError(
            line_number=line_number,
            raw=raw,
            reason="log line is not a JSON object",
            terminated=terminated,
        )
    message = decoded.get(fields.message_field)
    return LogEvent(
        line_number=line_number,
        session_id=_normalize_session_id(decoded.get(fields.session_field)),
        time=parse_event_time(decoded.get(fields.time_field)),
        message=message if isinstance(message, str) else "",
        payload=decoded,
        raw=raw,
    )


def parse_event_time(value: Any) -> datetime | None:
    """Convert an epoch-milliseconds number or ISO-8601 string into an aware datetime."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def _iter_lines(
    lines: Iterable[str], fields: EventFields, progress_every: int, label: str
) -> Iterator[LogRecord]:
    line_number = 0
    for line_number, raw_line in enumerate(lines, start=1):
        if progress_every > 0 and line_number % progress_every == 0:
            logger.info("[%s] line %d...", label, line_number)
            log_memory_usage(logger)
        if not raw_line.strip():
            continue
        record = parse_log_line(raw_line, line_number, fields)
        if isinstance(record, LogParseError):
            logger.warning(
                "[%s] line %d skipped (%s): %.200s", label, line_number, record.reason, record.raw
            )
        yield record
    logger.info("[%s] finished after %d lines.", label, line_number)


def _normalize_session_id(value: Any) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, (int, float)):
        return str(value)
    return None
