"""External integrations for the ledger view."""

from .statements_api import StatementsApiClient, StatementFetchError

__all__ = ["StatementsApiClient", "StatementFetchError"]
