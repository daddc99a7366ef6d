"""Results workbook writer service."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from unused_cards_report.outcome_reconciliation.reconciliation_outcomes import (
    ReconciliationResult,
    ResolutionReason,
)

from .candidate_table import CANDIDATE_COLUMNS, candidate_to_row
from .report_models import RunMetadata

UNRESOLVED_SHEET_NAME = "Unresolved"
RESOLVED_SHEET_NAME = "Resolved"
RUN_INFO_SHEET_NAME = "RunInfo"
_RESOLUTION_COLUMNS = ("reason", "resolved_by")


def write_results_workbook(
    output_path: Path | str,
    results: Sequence[ReconciliationResult],
    run_metadata: RunMetadata,
) -> Path:
    """Write unresolved and resolved candidates plus run metadata to an XLSX workbook."""
    workbook = Workbook()
    sheet = workbook.active
    if sheet is None:
        raise RuntimeError("Workbook active sheet is not available.")
    assert isinstance(sheet, Worksheet)
    sheet.title = UNRESOLVED_SHEET_NAME

    unresolved = [result for result in results if result.is_unresolved]
    resolved = [result for result in results if not result.is_unresolved]

    _write_header(sheet, CANDIDATE_COLUMNS)
    for row_index, result in enumerate(unresolved, start=2):
        _write_candidate_row(sheet, row_index, result)

    resolved_sheet = workbook.create_sheet(RESOLVED_SHEET_NAME)
    _write_header(resolved_sheet, CANDIDATE_COLUMNS + _RESOLUTION_COLUMNS)
    for row_index, result in enumerate(resolved, start=2):
        _write_candidate_row(resolved_sheet, row_index, result)
        reason_column = len(CANDIDATE_COLUMNS) + 1
        resolved_sheet.cell(
            row=row_index, column=reason_column, value=result.reason.value if result.reason else ""
        )
        resolved_sheet.cell(row=row_index, column=reason_column + 1, value=result.resolved_by)

    _write_run_info_sheet(workbook, run_metadata, results)

    destination = Path(output_path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(destination)
    return destination.resolve()


def _write_header(sheet, columns: Sequence[str]) -> None:
    for column_index, name in enumerate(columns, start=1):
        cell = sheet.cell(row=1, column=column_index, value=name)
        cell.style = "Headline 4"
        sheet.column_dimensions[get_column_letter(column_index)].width = max(
            12, min(len(name) + 6, 40)
        )
    sheet.freeze_panes = "A2"


def _write_candidate_row(sheet, row_index: int, result: ReconciliationResult) -> None:
    row = candidate_to_row(result.candidate)
    for column_index, name in enumerate(CANDIDATE_COLUMNS, start=1):
        # Card data stays text so Excel never rounds long numbers.
        cell = sheet.cell(row=row_index, column=column_index, value=row[name])
        cell.number_format = "@"


def _write_run_info_sheet(
    workbook: Workbook,
    run_metadata: RunMetadata,
    results: Sequence[ReconciliationResult],
) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    reused = sum(1 for item in results if item.reason == ResolutionReason.REUSED_SUCCESSFULLY)
    settled = sum(1 for item in results if item.reason == ResolutionReason.SETTLED_EXTERNALLY)
    entries = (
        ("run_start", run_metadata.run_start.isoformat()),
        ("log_path", str(run_metadata.log_path)),
        ("output_path", str(run_metadata.output_path)),
        ("ledger_path", str(run_metadata.ledger_path) if run_metadata.ledger_path else ""),
        ("matching_mode", run_metadata.matching_mode),
        ("interest_sessions", run_metadata.interest_sessions),
        ("candidates", run_metadata.candidates),
        ("unresolved", sum(1 for item in results if item.is_unresolved)),
        ("reused_successfully", reused),
        ("settled_externally", settled),
    )
    for row, (key, value) in enumerate(entries, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)
