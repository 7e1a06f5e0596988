"""Ledger view state machine."""

from .ledger_state import (
    LOAD_FAILED_MESSAGE,
    NO_TENANT_MESSAGE,
    LedgerViewState,
    StatementFetcher,
)

__all__ = [
    "LOAD_FAILED_MESSAGE",
    "NO_TENANT_MESSAGE",
    "LedgerViewState",
    "StatementFetcher",
]
