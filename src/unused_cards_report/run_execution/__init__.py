"""Run execution domain exports."""

from .attempts_report_use_case import ATTEMPT_COLUMNS, execute_attempts_report
from .reverification_use_cases import execute_missing_info_backfill, execute_second_attempt_recheck
from .run_contracts import (
    AttemptsOutcome,
    AttemptsRequest,
    BackfillOutcome,
    BackfillRequest,
    RecheckOutcome,
    RecheckRequest,
    ReportOutcome,
    ReportRequest,
)
from .run_support import RunExecutionError
from .unused_cards_use_case import build_candidates, execute_unused_cards_report

__all__ = [
    "ATTEMPT_COLUMNS",
    "AttemptsOutcome",
    "AttemptsRequest",
    "BackfillOutcome",
    "BackfillRequest",
    "RecheckOutcome",
    "RecheckRequest",
    "ReportOutcome",
    "ReportRequest",
    "RunExecutionError",
    "build_candidates",
    "execute_attempts_report",
    "execute_missing_info_backfill",
    "execute_second_attempt_recheck",
    "execute_unused_cards_report",
]
