"""Helpers shared by the run use cases."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path

from unused_cards_report.configuration import (
    Configuration,
    ConfigurationError,
    load_configuration,
)
from unused_cards_report.log_ingestion import LogRecord, iter_log_records

RecordSource = Callable[[], Iterator[LogRecord]]


class RunExecutionError(Exception):
    """Raised when a run use case cannot be completed."""


def load_run_configuration(config_path: str, log_path: str | None = None) -> Configuration:
    try:
        configuration = load_configuration(config_path)
    except (ConfigurationError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc
    if log_path:
        configuration = replace(
            configuration, log=replace(configuration.log, path=Path(log_path).resolve())
        )
    if not configuration.log.path.is_file():
        raise RunExecutionError(f"Log file not found: {configuration.log.path}")
    return configuration


def record_source(configuration: Configuration, label: str) -> RecordSource:
    """Return a factory restarting the log stream from line one on every call."""

    def _records() -> Iterator[LogRecord]:
        return iter_log_records(
            configuration.log.path,
            configuration.events,
            progress_every=configuration.log.progress_every,
            label=label,
        )

    return _records


def resolve_output_path(
    configuration: Configuration, output_dir: str | None, stem: str, suffix: str = ".csv"
) -> Path:
    destination = Path(output_dir) if output_dir else configuration.output.directory
    timestamp = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return destination / f"{stem}-{timestamp}{suffix}"


def derived_output_path(input_path: str, output_path: str | None, label: str) -> Path:
    if output_path:
        return Path(output_path)
    source = Path(input_path)
    return source.with_name(f"{source.stem}-{label}{source.suffix or '.csv'}")
