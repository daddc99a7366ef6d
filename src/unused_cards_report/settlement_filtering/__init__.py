"""Settlement filtering domain exports."""

from .settlement_filter import filter_settled
from .settlement_ledger import SettlementLedgerError, read_settled_keys

__all__ = ["SettlementLedgerError", "filter_settled", "read_settled_keys"]
