"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml

from .runtime_settings import (
    Configuration,
    EventFields,
    LogSettings,
    MatchingMode,
    MatchingSettings,
    OutputSettings,
    ReverificationSettings,
    SearchBackend,
    SettlementSettings,
)

_DEFAULT_EVENT_FIELDS = EventFields()


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:  # pragma: no cover - exercised indirectly
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    base_path = path.resolve().parent
    return Configuration(
        path=path,
        log=_parse_log_section(parsed.get("log"), base_path),
        events=_parse_events_section(parsed.get("events")),
        matching=_parse_matching_section(parsed.get("matching")),
        settlement=_parse_settlement_section(parsed.get("settlement"), base_path),
        reverification=_parse_reverification_section(parsed.get("reverification")),
        output=_parse_output_section(parsed.get("output"), base_path),
    )


def _parse_log_section(value: Any, base_path: Path) -> LogSettings:
    section = _require_mapping(value, "log")
    raw_path = _require_non_empty_string(section.get("path"), "log.path")
    progress_every = _require_positive_int(
        section.get("progress_every", 100_000), "log.progress_every"
    )
    return LogSettings(path=_resolve_path(base_path, raw_path), progress_every=progress_every)


def _parse_events_section(value: Any) -> EventFields:
    section = _optional_mapping(value, "events")
    defaults = _DEFAULT_EVENT_FIELDS
    stage_messages = section.get("card_stage_messages")
    return EventFields(
        session_field=_string_or_default(section, "session_field", defaults.session_field),
        time_field=_string_or_default(section, "time_field", defaults.time_field),
        message_field=_string_or_default(section, "message_field", defaults.message_field),
        order_id_field=_string_or_default(section, "order_id_field", defaults.order_id_field),
        card_stage_messages=(
            defaults.card_stage_messages
            if stage_messages is None
            else _normalize_string_sequence(stage_messages, "events.card_stage_messages")
        ),
        failure_message=_string_or_default(section, "failure_message", defaults.failure_message),
        success_message=_string_or_default(section, "success_message", defaults.success_message),
        success_flag_field=_string_or_default(
            section, "success_flag_field", defaults.success_flag_field
        ),
        balance_message=_string_or_default(section, "balance_message", defaults.balance_message),
        reward_link_field=_string_or_default(
            section, "reward_link_field", defaults.reward_link_field
        ),
        reward_link_message_prefix=_string_or_default(
            section, "reward_link_message_prefix", defaults.reward_link_message_prefix
        ),
    )


def _parse_matching_section(value: Any) -> MatchingSettings:
    section = _optional_mapping(value, "matching")
    raw_mode = _require_non_empty_string(section.get("mode", "field"), "matching.mode").lower()
    try:
        mode = MatchingMode(raw_mode)
    except ValueError as exc:
        raise ConfigurationError("matching.mode must be 'field' or 'substring'.") from exc
    return MatchingSettings(mode=mode)


def _parse_settlement_section(value: Any, base_path: Path) -> SettlementSettings:
    section = _optional_mapping(value, "settlement")
    raw_ledger_path = _optional_string(section.get("ledger_path"), "settlement.ledger_path")
    key_column = _require_non_empty_string(
        section.get("key_column", "Account"), "settlement.key_column"
    )
    return SettlementSettings(
        ledger_path=_resolve_path(base_path, raw_ledger_path) if raw_ledger_path else None,
        key_column=key_column,
    )


def _parse_reverification_section(value: Any) -> ReverificationSettings:
    section = _optional_mapping(value, "reverification")
    parallelism = _require_positive_int(
        section.get("parallelism", 20), "reverification.parallelism"
    )
    raw_search = _require_non_empty_string(
        section.get("search", "grep"), "reverification.search"
    ).lower()
    try:
        search = SearchBackend(raw_search)
    except ValueError as exc:
        raise ConfigurationError("reverification.search must be 'grep' or 'scan'.") from exc
    grep_executable = _require_non_empty_string(
        section.get("grep_executable", "grep"), "reverification.grep_executable"
    )
    key_min_length = _require_positive_int(
        section.get("key_min_length", 13), "reverification.key_min_length"
    )
    key_max_length = _require_positive_int(
        section.get("key_max_length", 19), "reverification.key_max_length"
    )
    if key_min_length > key_max_length:
        raise ConfigurationError(
            "reverification.key_min_length must not exceed reverification.key_max_length."
        )
    return ReverificationSettings(
        parallelism=parallelism,
        search=search,
        grep_executable=grep_executable,
        key_min_length=key_min_length,
        key_max_length=key_max_length,
    )


def _parse_output_section(value: Any, base_path: Path) -> OutputSettings:
    section = _optional_mapping(value, "output")
    directory = _require_non_empty_string(
        section.get("directory", "results"), "output.directory"
    )
    return OutputSettings(directory=_resolve_path(base_path, directory))


def _normalize_string_sequence(value: Any, field_name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        stripped = value.strip()
        return (stripped,) if stripped else ()
    if isinstance(value, Sequence):
        normalized = []
        for item in value:
            if not isinstance(item, str):
                raise ConfigurationError(f"{field_name} entries must be strings.")
            stripped = item.strip()
            if stripped:
                normalized.append(stripped)
        if not normalized:
            raise ConfigurationError(f"{field_name} must contain at least one entry.")
        return tuple(normalized)
    raise ConfigurationError(f"{field_name} must be a string or list of strings.")


def _resolve_path(base_path: Path, raw_path: str) -> Path:
    candidate = Path(raw_path)
    if not candidate.is_absolute():
        return (base_path / candidate).resolve()
    return candidate


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _string_or_default(section: Mapping[str, Any], key: str, default: str) -> str:
    value = section.get(key)
    if value is None:
        return default
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"events.{key} must be a non-empty string.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _optional_string(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    return stripped or None


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value
