"""Reader for externally reported settlement ledgers (CSV or XLSX)."""

from __future__ import annotations

import csv
from pathlib import Path

from openpyxl import load_workbook


class SettlementLedgerError(Exception):
    """Raised when the settlement ledger cannot be read."""


def read_settled_keys(ledger_path: Path | str, key_column: str) -> frozenset[str]:
    """Return the whitespace-trimmed, non-empty values of `key_column`."""
    path = Path(ledger_path)
    if not path.exists():
        raise SettlementLedgerError(f"Settlement ledger not found: {path}")
    try:
        if path.suffix.lower() in {".xlsx", ".xlsm"}:
            values = _read_workbook_column(path, key_column)
        else:
            values = _read_csv_column(path, key_column)
    except (OSError, csv.Error, ValueError) as exc:
        raise SettlementLedgerError(f"Failed to read settlement ledger {path}: {exc}") from exc
    return frozenset(value.strip() for value in values if value and value.strip())


def _read_csv_column(path: Path, key_column: str) -> list[str]:
    with path.open(encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if reader.fieldnames is None or key_column not in reader.fieldnames:
            raise SettlementLedgerError(
                f"Settlement ledger {path} has no '{key_column}' column."
            )
        return [row.get(key_column) or "" for row in reader]


def _read_workbook_column(path: Path, key_column: str) -> list[str]:
    workbook = load_workbook(path, read_only=True, data_only=True)
    try:
        sheet = workbook.active
        if sheet is None:
            raise SettlementLedgerError(f"Settlement ledger {path} has no active sheet.")
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None or key_column not in header:
            raise SettlementLedgerError(
                f"Settlement ledger {path} has no '{key_column}' column."
            )
        column_index = list(header).index(key_column)
        return [
            str(row[column_index])
            for row in rows
            if column_index < len(row) and row[column_index] is not None
        ]
    finally:
        workbook.close()
