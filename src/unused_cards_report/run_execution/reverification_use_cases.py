"""Use cases driven by targeted log search over a candidate table."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from unused_cards_report.batch_reverification import (
    Checkpoint,
    CheckpointError,
    KeyRule,
    LogSearch,
    LogSearchError,
    ReverificationState,
    build_log_search,
    load_checkpoint,
    parse_found_lines,
    read_excluded_keys,
    reverify_candidates,
    run_in_waves,
    save_checkpoint,
)
from unused_cards_report.candidate_extraction import Candidate, enrich_candidate
from unused_cards_report.candidate_tables import (
    CandidateTableError,
    read_candidates_csv,
    write_candidates_csv,
)
from unused_cards_report.configuration import Configuration
from unused_cards_report.outcome_reconciliation import build_matcher
from unused_cards_report.session_aggregation import OutcomeSignals

from .run_contracts import BackfillOutcome, BackfillRequest, RecheckOutcome, RecheckRequest
from .run_support import RunExecutionError, derived_output_path, load_run_configuration

logger = logging.getLogger(__name__)


def execute_second_attempt_recheck(
    request: RecheckRequest, *, log_search: LogSearch | None = None
) -> RecheckOutcome:
    """Drop candidates whose card was later used successfully, resuming from a checkpoint."""
    configuration = load_run_configuration(request.config_path)
    candidates = _read_candidates(request.input_path)
    checkpoint = _starting_checkpoint(request)
    search = log_search or build_log_search(configuration.log.path, configuration.reverification)
    settings = configuration.reverification

    def _persist(reached: Checkpoint) -> None:
        if request.checkpoint_path:
            save_checkpoint(request.checkpoint_path, reached)
        logger.info("Processed %d of %d candidates.", reached.processed_up_to, len(candidates))

    try:
        batch = reverify_candidates(
            candidates,
            search,
            signals=OutcomeSignals.from_fields(configuration.events),
            parallelism=settings.parallelism,
            checkpoint=checkpoint,
            key_rule=KeyRule(settings.key_min_length, settings.key_max_length),
            matcher=build_matcher(configuration.matching.mode),
            fields=configuration.events,
            on_wave_complete=_persist,
        )
    except OSError as exc:
        raise RunExecutionError(str(exc)) from exc
    except Exception as exc:
        raise RunExecutionError(f"re-verification aborted: {exc}") from exc

    output_path = derived_output_path(request.input_path, request.output_path, "rechecked")
    retained = batch.retained_candidates
    try:
        written = write_candidates_csv(output_path, retained)
    except CandidateTableError as exc:
        raise RunExecutionError(str(exc)) from exc
    return RecheckOutcome(
        output_path=written,
        retained=len(retained),
        resolved=batch.count(ReverificationState.VERIFIED_RESOLVED),
        flagged=batch.count(ReverificationState.FLAGGED_FOR_REVIEW),
        skipped=batch.count(ReverificationState.SKIPPED_BY_CHECKPOINT),
        checkpoint=batch.checkpoint,
    )


def execute_missing_info_backfill(
    request: BackfillRequest, *, log_search: LogSearch | None = None
) -> BackfillOutcome:
    """Fill reward link and balance of each candidate from its own session events."""
    configuration = load_run_configuration(request.config_path)
    candidates = _read_candidates(request.input_path)
    search = log_search or build_log_search(configuration.log.path, configuration.reverification)

    def _backfill(candidate: Candidate) -> tuple[Candidate, bool]:
        if candidate.reward_link is not None and candidate.balance is not None:
            return candidate, True
        try:
            return _backfill_candidate(candidate, search, configuration), True
        except LogSearchError as exc:
            logger.warning(
                "Could not backfill card %s of session %s: %s",
                candidate.masked_card_number,
                candidate.session_id,
                exc,
            )
            return candidate, False

    completed: list[Candidate] = []
    failed = 0
    waves = run_in_waves(
        candidates, _backfill, parallelism=configuration.reverification.parallelism
    )
    try:
        for wave in waves:
            for candidate, ok in wave:
                completed.append(candidate)
                failed += 0 if ok else 1
            logger.info("Backfilled %d of %d candidates.", len(completed), len(candidates))
    except Exception as exc:
        raise RunExecutionError(f"backfill aborted: {exc}") from exc

    output_path = derived_output_path(request.input_path, request.output_path, "backfilled")
    try:
        written = write_candidates_csv(output_path, completed)
    except CandidateTableError as exc:
        raise RunExecutionError(str(exc)) from exc
    filled = sum(
        1
        for candidate in completed
        if candidate.reward_link is not None or candidate.balance is not None
    )
    return BackfillOutcome(output_path=written, filled=filled, failed=failed)


def _backfill_candidate(
    candidate: Candidate, search: LogSearch, configuration: Configuration
) -> Candidate:
    events = [
        event
        for event in parse_found_lines(
            search.find_lines([candidate.session_id]), configuration.events
        )
        if event.session_id == candidate.session_id
    ]
    return enrich_candidate(candidate, events, configuration.events)


def _read_candidates(input_path: str) -> Sequence[Candidate]:
    try:
        return read_candidates_csv(input_path)
    except CandidateTableError as exc:
        raise RunExecutionError(str(exc)) from exc


def _starting_checkpoint(request: RecheckRequest) -> Checkpoint:
    try:
        checkpoint = load_checkpoint(request.checkpoint_path)
        excluded_keys = (
            read_excluded_keys(request.excluded_keys_path)
            if request.excluded_keys_path
            else frozenset()
        )
    except CheckpointError as exc:
        raise RunExecutionError(str(exc)) from exc
    processed_up_to = (
        request.resume_index if request.resume_index is not None else checkpoint.processed_up_to
    )
    if processed_up_to < 0:
        raise RunExecutionError("Resume index must not be negative.")
    return Checkpoint(
        processed_up_to=processed_up_to,
        excluded_keys=checkpoint.excluded_keys | excluded_keys,
    )
