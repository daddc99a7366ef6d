"""Log ingestion entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class LogEvent:
    """One parsed line of the payment pipeline log."""

    line_number: int
    session_id: str | None
    time: datetime | None
    message: str
    payload: Mapping[str, Any]
    raw: str


@dataclass(frozen=True)
class LogParseError:
    """A line that could not be decoded into an event."""

    line_number: int
    raw: str
    reason: str
    terminated: bool


LogRecord = LogEvent | LogParseError
