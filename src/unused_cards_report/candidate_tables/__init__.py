"""Candidate table domain exports."""

from .candidate_table import (
    CANDIDATE_COLUMNS,
    CandidateTableError,
    candidate_from_row,
    candidate_to_row,
    format_timestamp,
    read_candidates_csv,
    write_candidates_csv,
    write_table_csv,
)
from .report_models import RunMetadata
from .results_workbook import (
    RESOLVED_SHEET_NAME,
    RUN_INFO_SHEET_NAME,
    UNRESOLVED_SHEET_NAME,
    write_results_workbook,
)

__all__ = [
    "CANDIDATE_COLUMNS",
    "CandidateTableError",
    "RESOLVED_SHEET_NAME",
    "RUN_INFO_SHEET_NAME",
    "RunMetadata",
    "UNRESOLVED_SHEET_NAME",
    "candidate_from_row",
    "candidate_to_row",
    "format_timestamp",
    "read_candidates_csv",
    "write_candidates_csv",
    "write_results_workbook",
    "write_table_csv",
]
