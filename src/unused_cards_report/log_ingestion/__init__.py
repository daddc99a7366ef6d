"""Log ingestion domain exports."""

from .log_events import LogEvent, LogParseError, LogRecord
from .log_stream_reader import iter_log_records, parse_event_time, parse_log_line
from .memory_telemetry import MemorySnapshot, log_memory_usage, take_memory_snapshot

__all__ = [
    "LogEvent",
    "LogParseError",
    "LogRecord",
    "MemorySnapshot",
    "iter_log_records",
    "log_memory_usage",
    "parse_event_time",
    "parse_log_line",
    "take_memory_snapshot",
]
