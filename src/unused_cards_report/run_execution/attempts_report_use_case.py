"""Per-session payment attempts report."""

from __future__ import annotations

import logging
from collections import Counter

from unused_cards_report.candidate_extraction import find_order_id
from unused_cards_report.candidate_tables import (
    CandidateTableError,
    format_timestamp,
    write_table_csv,
)
from unused_cards_report.session_aggregation import (
    OutcomeSignals,
    SessionOutcome,
    TruncatedLogError,
    collect_events,
    session_outcome,
)

from .run_contracts import AttemptsOutcome, AttemptsRequest
from .run_support import (
    RunExecutionError,
    load_run_configuration,
    record_source,
    resolve_output_path,
)

logger = logging.getLogger(__name__)

ATTEMPTS_STEM = "payment-attempts"
ATTEMPT_COLUMNS: tuple[str, ...] = ("run_id", "order_id", "timestamp", "outcome")


def execute_attempts_report(request: AttemptsRequest) -> AttemptsOutcome:
    """Write one row per session with its first timestamp, order id and outcome."""
    configuration = load_run_configuration(request.config_path, request.log_path)
    signals = OutcomeSignals.from_fields(configuration.events)
    try:
        sessions = collect_events(record_source(configuration, "attempts")())
    except (TruncatedLogError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc

    rows: list[dict[str, str | None]] = []
    outcomes: Counter[SessionOutcome] = Counter()
    for session_id, events in sessions.items():
        outcome = session_outcome(events, signals)
        outcomes[outcome] += 1
        first_time = next((event.time for event in events if event.time is not None), None)
        rows.append(
            {
                "run_id": session_id,
                "order_id": find_order_id(events, configuration.events),
                "timestamp": format_timestamp(first_time) if first_time else None,
                "outcome": outcome.value,
            }
        )

    output_path = resolve_output_path(configuration, request.output_dir, ATTEMPTS_STEM)
    try:
        written = write_table_csv(output_path, ATTEMPT_COLUMNS, rows)
    except CandidateTableError as exc:
        raise RunExecutionError(str(exc)) from exc
    logger.info("Wrote %d payment attempts to %s.", len(rows), written)
    return AttemptsOutcome(
        output_path=written,
        sessions=len(rows),
        succeeded=outcomes[SessionOutcome.SUCCEEDED],
        failed=outcomes[SessionOutcome.FAILED],
        unknown=outcomes[SessionOutcome.UNKNOWN],
    )
