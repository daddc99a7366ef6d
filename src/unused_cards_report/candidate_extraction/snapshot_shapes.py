"""Known layouts of card data inside a log event.

Shapes are tried in priority order. A shape is accepted only when every
required field resolves inside its own container; values are never combined
across shapes.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from unused_cards_report.log_ingestion.log_events import LogEvent

from .candidate_models import CardSnapshot


@dataclass(frozen=True)
class SnapshotShape:
    """One tagged card-data layout."""

    name: str
    container_field: str
    required_fields: tuple[str, ...]

    def resolve(self, payload: Mapping[str, Any]) -> CardSnapshot | None:
        container = payload.get(self.container_field)
        if not isinstance(container, Mapping):
            return None
        values: dict[str, str] = {}
        for field_name in ("cardNumber", "expirationDate", "cvv", "lastKnownIp"):
            value = _scalar_text(container.get(field_name))
            if value is None and field_name in self.required_fields:
                return None
            values[field_name] = value or ""
        return CardSnapshot(
            shape=self.name,
            card_number=values["cardNumber"],
            expiration_date=values["expirationDate"],
            cvv=values["cvv"],
            last_known_ip=values["lastKnownIp"],
        )


CARD_DATA = SnapshotShape(
    name="card_data",
    container_field="cardData",
    required_fields=("cardNumber", "expirationDate", "cvv"),
)
AVAILABLE_STORED_CARD = SnapshotShape(
    name="available_stored_card",
    container_field="availableStoredCard",
    required_fields=("cardNumber", "expirationDate"),
)

SNAPSHOT_SHAPES: tuple[SnapshotShape, ...] = (CARD_DATA, AVAILABLE_STORED_CARD)


def extract_snapshot(
    event: LogEvent, shapes: tuple[SnapshotShape, ...] = SNAPSHOT_SHAPES
) -> CardSnapshot | None:
    """Return the snapshot of the first shape that fully resolves, if any."""
    for shape in shapes:
        snapshot = shape.resolve(event.payload)
        if snapshot is not None:
            return snapshot
    return None


def _scalar_text(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, int):
        return str(value)
    return None
