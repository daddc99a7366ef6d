"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from unused_cards_report.batch_reverification.reverification_outcomes import Checkpoint


@dataclass(frozen=True)
class ReportRequest:
    """Input contract for one unused-cards report run."""

    config_path: str
    output_dir: str | None = None
    log_path: str | None = None
    ledger_path: str | None = None
    workbook: bool = False


@dataclass(frozen=True)
class ReportOutcome:
    """Output contract for one completed report run."""

    output_path: Path
    workbook_path: Path | None
    candidates: int
    unresolved: int
    reused: int
    settled: int


@dataclass(frozen=True)
class RecheckRequest:
    """Input contract for re-verifying a previously written candidate table."""

    config_path: str
    input_path: str
    output_path: str | None = None
    checkpoint_path: str | None = None
    resume_index: int | None = None
    excluded_keys_path: str | None = None


@dataclass(frozen=True)
class RecheckOutcome:
    """Output contract for one completed re-verification."""

    output_path: Path
    retained: int
    resolved: int
    flagged: int
    skipped: int
    checkpoint: Checkpoint


@dataclass(frozen=True)
class BackfillRequest:
    """Input contract for filling reward link and balance into a candidate table."""

    config_path: str
    input_path: str
    output_path: str | None = None


@dataclass(frozen=True)
class BackfillOutcome:
    """Output contract for one completed backfill."""

    output_path: Path
    filled: int
    failed: int


@dataclass(frozen=True)
class AttemptsRequest:
    """Input contract for the per-session payment attempts report."""

    config_path: str
    output_dir: str | None = None
    log_path: str | None = None


@dataclass(frozen=True)
class AttemptsOutcome:
    """Output contract for one completed attempts report."""

    output_path: Path
    sessions: int
    succeeded: int
    failed: int
    unknown: int
