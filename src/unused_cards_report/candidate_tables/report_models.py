"""Results writing entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class RunMetadata:
    """Metadata rendered into the RunInfo sheet."""

    run_start: datetime
    log_path: Path
    output_path: Path
    matching_mode: str
    interest_sessions: int
    candidates: int
    ledger_path: Path | None = None
