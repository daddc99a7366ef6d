"""Batch re-verification domain exports."""

from .batch_processor import KeyRule, reverify_candidates, verify_candidate
from .checkpoint_store import CheckpointError, load_checkpoint, read_excluded_keys, save_checkpoint
from .log_search import (
    GrepLogSearch,
    LogSearch,
    LogSearchError,
    ScanLogSearch,
    build_log_search,
    parse_found_lines,
)
from .reverification_outcomes import (
    BatchOutcome,
    Checkpoint,
    ReverificationResult,
    ReverificationState,
)
from .wave_runner import run_in_waves

__all__ = [
    "BatchOutcome",
    "Checkpoint",
    "CheckpointError",
    "GrepLogSearch",
    "KeyRule",
    "LogSearch",
    "LogSearchError",
    "ReverificationResult",
    "ReverificationState",
    "ScanLogSearch",
    "build_log_search",
    "parse_found_lines",
    "load_checkpoint",
    "read_excluded_keys",
    "reverify_candidates",
    "run_in_waves",
    "save_checkpoint",
    "verify_candidate",
]
