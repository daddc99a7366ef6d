"""CSV source and sink for candidate lists."""

from __future__ import annotations

import csv
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from pathlib import Path

from unused_cards_report.candidate_extraction.candidate_models import Candidate

CANDIDATE_COLUMNS: tuple[str, ...] = (
    "run_id",
    "order_id",
    "timestamp",
    "cardNumber",
    "expirationDate",
    "cvv",
    "lastKnownIp",
    "trucentiveLink",
    "balance",
)
_REQUIRED_COLUMNS = ("run_id", "timestamp", "cardNumber")


class CandidateTableError(Exception):
    """Raised when a candidate table cannot be read or written."""


def format_timestamp(value: datetime) -> str:
    """Render an aware datetime as ISO-8601 UTC with milliseconds and a Z suffix."""
    moment = value.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def candidate_to_row(candidate: Candidate) -> dict[str, str]:
    """Serialize one candidate; absent values become empty strings."""
    return {
        "run_id": candidate.session_id,
        "order_id": candidate.order_id or "",
        "timestamp": format_timestamp(candidate.timestamp),
        "cardNumber": candidate.card_number,
        "expirationDate": candidate.expiration_date,
        "cvv": candidate.cvv,
        "lastKnownIp": candidate.last_known_ip,
        "trucentiveLink": candidate.reward_link or "",
        "balance": candidate.balance or "",
    }


def candidate_from_row(row: Mapping[str, str | None], row_number: int = 0) -> Candidate:
    """Deserialize one table row into a candidate."""
    for column in _REQUIRED_COLUMNS:
        if not (row.get(column) or "").strip():
            raise CandidateTableError(f"Row {row_number}: column '{column}' must not be empty.")
    raw_timestamp = (row.get("timestamp") or "").strip()
    try:
        timestamp = datetime.fromisoformat(raw_timestamp)
    except ValueError as exc:
        raise CandidateTableError(
            f"Row {row_number}: invalid timestamp '{raw_timestamp}'."
        ) from exc
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return Candidate(
        session_id=row.get("run_id") or "",
        order_id=_optional(row.get("order_id")),
        timestamp=timestamp,
        card_number=row.get("cardNumber") or "",
        expiration_date=row.get("expirationDate") or "",
        cvv=row.get("cvv") or "",
        last_known_ip=row.get("lastKnownIp") or "",
        reward_link=_optional(row.get("trucentiveLink")),
        balance=_optional(row.get("balance")),
    )


def write_candidates_csv(output_path: Path | str, candidates: Iterable[Candidate]) -> Path:
    """Write candidates with a header row and return the resolved path."""
    return write_table_csv(
        output_path, CANDIDATE_COLUMNS, (candidate_to_row(c) for c in candidates)
    )


def read_candidates_csv(input_path: Path | str) -> list[Candidate]:
    """Read a candidate table written by `write_candidates_csv` (or the legacy report)."""
    path = Path(input_path)
    if not path.exists():
        raise CandidateTableError(f"Candidate table not found: {path}")
    try:
        with path.open(encoding="utf-8-sig", newline="") as handle:
            reader = csv.DictReader(handle)
            if reader.fieldnames is None:
                return []
            missing = [column for column in _REQUIRED_COLUMNS if column not in reader.fieldnames]
            if missing:
                raise CandidateTableError(
                    f"Candidate table {path} is missing columns: {', '.join(missing)}"
                )
            return [
                candidate_from_row(row, row_number)
                for row_number, row in enumerate(reader, start=2)
            ]
    except (OSError, csv.Error) as exc:
        raise CandidateTableError(f"Failed to read candidate table {path}: {exc}") from exc


def write_table_csv(
    output_path: Path | str,
    columns: Sequence[str],
    rows: Iterable[Mapping[str, object]],
) -> Path:
    """Write mapping rows under `columns`; missing or None values become empty strings."""
    path = Path(output_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.writer(handle, lineterminator="\n")
            writer.writerow(columns)
            for row in rows:
                writer.writerow(
                    ["" if row.get(column) is None else row[column] for column in columns]
                )
    except OSError as exc:
        raise CandidateTableError(f"Failed to write table {path}: {exc}") from exc
    return path.resolve()


def _optional(value: str | None) -> str | None:
    return value or None
