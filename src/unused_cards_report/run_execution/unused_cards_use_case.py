"""Unused-cards report use-case service."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path

from unused_cards_report.candidate_extraction import (
    Candidate,
    deduplicate_candidates,
    enrich_candidate,
    extract_candidate,
)
from unused_cards_report.candidate_tables import (
    CandidateTableError,
    RunMetadata,
    write_candidates_csv,
    write_results_workbook,
)
from unused_cards_report.configuration import Configuration, EventFields
from unused_cards_report.log_ingestion import LogEvent
from unused_cards_report.outcome_reconciliation import (
    ConsistencyViolationError,
    ReconciliationResult,
    ResolutionReason,
    build_matcher,
    reconcile_candidates,
)
from unused_cards_report.session_aggregation import (
    OutcomeSignals,
    TruncatedLogError,
    collect_event_stream,
    derive_interest_set,
    group_by_session,
    message_in,
    session_reported_failure,
)
from unused_cards_report.settlement_filtering import (
    SettlementLedgerError,
    filter_settled,
    read_settled_keys,
)

from .run_contracts import ReportOutcome, ReportRequest
from .run_support import (
    RunExecutionError,
    load_run_configuration,
    record_source,
    resolve_output_path,
)

logger = logging.getLogger(__name__)

REPORT_STEM = "unused-cards"


def execute_unused_cards_report(request: ReportRequest) -> ReportOutcome:
    """Execute one full unused-cards report run and return the run outcome."""
    configuration = load_run_configuration(request.config_path, request.log_path)
    ledger_path = Path(request.ledger_path) if request.ledger_path else None
    ledger_path = ledger_path or configuration.settlement.ledger_path
    run_start = datetime.now(UTC)
    signals = OutcomeSignals.from_fields(configuration.events)
    records = record_source(configuration, "report")

    try:
        interest_set = derive_interest_set(
            records(), message_in(configuration.events.card_stage_messages)
        )
        events = collect_event_stream(records(), interest_set)
        candidates = build_candidates(group_by_session(events), configuration.events, signals)
        results = reconcile_candidates(
            events,
            candidates,
            signals=signals,
            matcher=build_matcher(configuration.matching.mode),
        )
        settled_keys = (
            read_settled_keys(ledger_path, configuration.settlement.key_column)
            if ledger_path
            else None
        )
        results = filter_settled(results, settled_keys)
    except ConsistencyViolationError as exc:
        raise RunExecutionError(f"consistency violation: {exc}") from exc
    except (TruncatedLogError, SettlementLedgerError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc

    output_path = resolve_output_path(configuration, request.output_dir, REPORT_STEM)
    unresolved = [result.candidate for result in results if result.is_unresolved]
    try:
        written = write_candidates_csv(output_path, unresolved)
        workbook_path = (
            _write_workbook(
                configuration,
                results,
                run_start=run_start,
                output_path=written,
                ledger_path=ledger_path,
                interest_sessions=len(interest_set),
            )
            if request.workbook
            else None
        )
    except (CandidateTableError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc

    outcome = ReportOutcome(
        output_path=written,
        workbook_path=workbook_path,
        candidates=len(results),
        unresolved=len(unresolved),
        reused=_count_reason(results, ResolutionReason.REUSED_SUCCESSFULLY),
        settled=_count_reason(results, ResolutionReason.SETTLED_EXTERNALLY),
    )
    logger.info(
        "%d of %d candidates remain unused (%d reused, %d settled).",
        outcome.unresolved,
        outcome.candidates,
        outcome.reused,
        outcome.settled,
    )
    return outcome


def build_candidates(
    sessions: Mapping[str, Sequence[LogEvent]],
    fields: EventFields,
    signals: OutcomeSignals,
) -> list[Candidate]:
    """Extract, deduplicate and enrich candidates from sessions that reported a failure.

    The result is ordered by capture time, oldest first.
    """
    extracted: list[Candidate] = []
    for session_events in sessions.values():
        if not session_reported_failure(session_events, signals):
            continue
        candidate = extract_candidate(session_events, fields)
        if candidate is not None:
            extracted.append(candidate)
    survivors = deduplicate_candidates(extracted)
    logger.info(
        "Extracted %d candidates, %d after deduplication.", len(extracted), len(survivors)
    )
    ordered = sorted(
        survivors.values(), key=lambda candidate: (candidate.timestamp, candidate.session_id)
    )
    return [
        enrich_candidate(candidate, sessions[candidate.session_id], fields) for candidate in ordered
    ]


def _write_workbook(
    configuration: Configuration,
    results: Sequence[ReconciliationResult],
    *,
    run_start: datetime,
    output_path: Path,
    ledger_path: Path | None,
    interest_sessions: int,
) -> Path:
    workbook_path = output_path.with_suffix(".xlsx")
    run_metadata = RunMetadata(
        run_start=run_start,
        log_path=configuration.log.path,
        output_path=workbook_path.resolve(),
        matching_mode=configuration.matching.mode.value,
        interest_sessions=interest_sessions,
        candidates=len(results),
        ledger_path=ledger_path,
    )
    return write_results_workbook(workbook_path, results, run_metadata)


def _count_reason(results: Sequence[ReconciliationResult], reason: ResolutionReason) -> int:
    return sum(1 for result in results if result.reason == reason)
