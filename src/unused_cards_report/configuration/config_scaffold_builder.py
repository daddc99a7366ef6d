"""Configuration scaffold generation helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_FILENAME = "config.yaml"

_CONFIG_SCAFFOLD_TEMPLATE = """# Report configuration template for unused-cards-report.
# Replace every <REQUIRED> placeholder before running report, recheck, backfill or attempts.
# Sections other than log are optional; the commented values are the defaults.

log:
  # Merged, chronologically ordered event log (one JSON object per line).
  path: "<REQUIRED>"
  # progress_every: 100000

# events:
#   session_field: "runId"
#   time_field: "time"
#   message_field: "msg"
#   order_id_field: "orderId"
#   card_stage_messages:
#     - "Response from processCard"
#     - "Card stored to use"
#   failure_message: "Error while making Requests"
#   success_message: "Response from payOnLandingPagePnm"
#   success_flag_field: "isSuccess"
#   balance_message: "Response from getAmountToCollect"
#   reward_link_field: "trucentiveLink"
#   reward_link_message_prefix: "Initial card data stored for trucentiveLink: "

matching:
  # field: compare the card number of a parsed snapshot.
  # substring: any log line containing the card number counts as a reuse.
  mode: "field"

settlement:
  # Externally reported settled payments (CSV or XLSX).
  # ledger_path: "<OPTIONAL>"
  key_column: "Account"

reverification:
  parallelism: 20
  # grep runs the system grep binary; scan reads the log in-process.
  search: "grep"
  # grep_executable: "grep"
  key_min_length: 13
  key_max_length: 19

output:
  directory: "results"
"""


def build_placeholder_configuration() -> str:
    """Build a YAML report configuration template with placeholders and inline guidance."""
    return _CONFIG_SCAFFOLD_TEMPLATE


def write_placeholder_configuration(output_path: Path | str) -> Path:
    """Write the placeholder configuration template to the requested output path.

    Args:
      output_path: Destination file path for the scaffold.

    Returns:
      The resolved destination path.

    Raises:
      FileExistsError: If the destination file already exists.
      OSError: If writing the scaffold fails.
    """
    destination = Path(output_path)
    if destination.exists():
        raise FileExistsError(f"Configuration file already exists: {destination.resolve()}")
    destination.write_text(build_placeholder_configuration(), encoding="utf-8")
    return destination.resolve()
