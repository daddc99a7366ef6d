"""Candidate extraction entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CardSnapshot:
    """Card data captured by one log event, tagged with the shape it was read from."""

    shape: str
    card_number: str
    expiration_date: str
    cvv: str
    last_known_ip: str


@dataclass(frozen=True)
class Candidate:  # pylint: disable=too-many-instance-attributes
    """Card captured in a failed session that may never have been charged."""

    session_id: str
    order_id: str | None
    timestamp: datetime
    card_number: str
    expiration_date: str
    cvv: str
    last_known_ip: str
    reward_link: str | None = None
    balance: str | None = None

    @property
    def masked_card_number(self) -> str:
        return mask_card_number(self.card_number)


def mask_card_number(card_number: str) -> str:
    """Keep the last four digits only, for log output."""
    if len(card_number) <= 4:
        return "*" * len(card_number)
    return "*" * (len(card_number) - 4) + card_number[-4:]
