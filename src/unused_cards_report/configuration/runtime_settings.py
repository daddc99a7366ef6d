"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class MatchingMode(str, Enum):
    """How a log event is compared with a candidate card number."""

    FIELD = "field"
    SUBSTRING = "substring"


class SearchBackend(str, Enum):
    """Targeted log search implementation used by re-verification."""

    GREP = "grep"
    SCAN = "scan"


@dataclass(frozen=True)
class LogSettings:
    """Location of the merged event log and progress cadence."""

    path: Path
    progress_every: int


@dataclass(frozen=True)
class EventFields:  # pylint: disable=too-many-instance-attributes
    """Field names and message tags used by the payment pipeline log."""

    session_field: str = "runId"
    time_field: str = "time"
    message_field: str = "msg"
    order_id_field: str = "orderId"
    card_stage_messages: tuple[str, ...] = ("Response from processCard", "Card stored to use")
    failure_message: str = "Error while making Requests"
    success_message: str = "Response from payOnLandingPagePnm"
    success_flag_field: str = "isSuccess"
    balance_message: str = "Response from getAmountToCollect"
    reward_link_field: str = "trucentiveLink"
    reward_link_message_prefix: str = "Initial card data stored for trucentiveLink: "


@dataclass(frozen=True)
class MatchingSettings:
    """Reuse detection settings."""

    mode: MatchingMode


@dataclass(frozen=True)
class SettlementSettings:
    """Externally reported settlement ledger."""

    ledger_path: Path | None
    key_column: str


@dataclass(frozen=True)
class ReverificationSettings:
    """Bounded-concurrency re-verification settings."""

    parallelism: int
    search: SearchBackend
    grep_executable: str
    key_min_length: int
    key_max_length: int


@dataclass(frozen=True)
class OutputSettings:
    """Where reports are written."""

    directory: Path


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path
    log: LogSettings
    events: EventFields
    matching: MatchingSettings
    settlement: SettlementSettings
    reverification: ReverificationSettings
    output: OutputSettings
