"""Data models for the ledger view."""

from .enums import (
    SourceType,
    LoadingStatus,
)
from .statement import (
    LedgerEntry,
    StatementSnapshot,
)
from .view_state import (
    DEFAULT_PAGE_SIZE,
    FilterSet,
    PaginationCursor,
    LoadState,
    compute_total_pages,
)

__all__ = [
    # Enums
    "SourceType",
    "LoadingStatus",
    # Statement
    "LedgerEntry",
    "StatementSnapshot",
    # View state
    "DEFAULT_PAGE_SIZE",
    "FilterSet",
    "PaginationCursor",
    "LoadState",
    "compute_total_pages",
]
