"""Targeted search of the event log for fixed strings."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol

from unused_cards_report.configuration.runtime_settings import (
    EventFields,
    ReverificationSettings,
    SearchBackend,
)
from unused_cards_report.log_ingestion.log_events import LogEvent
from unused_cards_report.log_ingestion.log_stream_reader import parse_log_line

logger = logging.getLogger(__name__)


class LogSearchError(Exception):
    """Raised when a targeted log search cannot be completed."""


class LogSearch(Protocol):  # pylint: disable=too-few-public-methods
    """Protocol for services returning raw log lines containing any pattern."""

    def find_lines(self, patterns: Sequence[str]) -> list[str]: ...


class GrepLogSearch:  # pylint: disable=too-few-public-methods
    """Runs `grep -F -a` against the log file.

    Output is decoded as UTF-8 with replacement characters, the same way
    `ScanLogSearch` and the log stream reader decode the file.
    """

    def __init__(self, log_path: Path, executable: str = "grep") -> None:
        self._log_path = log_path
        self._executable = executable

    def find_lines(self, patterns: Sequence[str]) -> list[str]:
        if not patterns:
            return []
        command = [self._executable, "-F", "-a"]
        for pattern in patterns:
            command.extend(("-e", pattern))
        command.extend(("--", str(self._log_path)))
        logger.debug("Searching %s for %d patterns.", self._log_path, len(patterns))
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except OSError as exc:
            raise LogSearchError(f"Search command could not be started: {exc}") from exc
        # grep exits 1 when nothing matched.
        if completed.returncode == 1:
            return []
        if completed.returncode != 0:
            raise LogSearchError(
                f"Search command failed with exit code {completed.returncode}: "
                f"{completed.stderr.strip()}"
            )
        return completed.stdout.splitlines()


class ScanLogSearch:  # pylint: disable=too-few-public-methods
    """Reads the log file in-process and keeps lines containing any pattern."""

    def __init__(self, log_path: Path) -> None:
        self._log_path = log_path

    def find_lines(self, patterns: Sequence[str]) -> list[str]:
        if not patterns:
            return []
        matches: list[str] = []
        try:
            with open(self._log_path, encoding="utf-8", errors="replace") as handle:
                for line in handle:
                    if any(pattern in line for pattern in patterns):
                        matches.append(line.rstrip("\r\n"))
        except OSError as exc:
            raise LogSearchError(f"Failed to scan {self._log_path}: {exc}") from exc
        return matches


def build_log_search(log_path: Path, settings: ReverificationSettings) -> LogSearch:
    if settings.search == SearchBackend.SCAN:
        return ScanLogSearch(log_path)
    return GrepLogSearch(log_path, executable=settings.grep_executable)


def parse_found_lines(lines: Iterable[str], fields: EventFields) -> list[LogEvent]:
    """Decode search result lines, dropping the ones that are not JSON objects."""
    events: list[LogEvent] = []
    for position, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        record = parse_log_line(line, position, fields)
        if isinstance(record, LogEvent):
            events.append(record)
        else:
            logger.debug("Search result line %d skipped (%s).", position, record.reason)
    return events
