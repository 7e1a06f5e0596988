"""Paginated, filterable account ledger view backed by the statements API."""

from .context import RouteContext, TenantService
from .integrations import StatementFetchError, StatementsApiClient
from .transactions import LedgerViewState

__all__ = [
    "LedgerViewState",
    "RouteContext",
    "StatementFetchError",
    "StatementsApiClient",
    "TenantService",
]
