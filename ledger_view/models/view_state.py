"""
Filter, pagination and loading-state models for the ledger view.

All of them are immutable snapshots: every change produces a new instance,
so a fetch in flight never observes a half-applied update.
"""

import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional

from .enums import LoadingStatus, SourceType
from .statement import LedgerEntry

DEFAULT_PAGE_SIZE = 50

FILTER_FIELDS = ("start_date", "end_date", "source_type", "linked_invoice_id")


def _coerce_date(name: str, value: Any) -> date:
    """Accept a date, a datetime (its day) or an ISO ``YYYY-MM-DD`` string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value.strip())
    raise ValueError(f"Invalid {name}: {value!r}")


@dataclass(frozen=True)
class FilterSet:
    """
    Recognized ledger filters. ``None`` means "no constraint".
    """
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    source_type: Optional[SourceType] = None
    linked_invoice_id: Optional[str] = None

    def merge(self, changes: Mapping[str, Any]) -> "FilterSet":
        """
        Return a new filter set with ``changes`` applied.

        Keys absent from ``changes`` keep their current value; a key present
        with ``None`` clears that filter.
        """
        unknown = set(changes) - set(FILTER_FIELDS)
        if unknown:
            raise ValueError(f"Unknown filter fields: {sorted(unknown)}")

        values = dict(changes)
        for name in ("start_date", "end_date"):
            if values.get(name) is not None:
                values[name] = _coerce_date(name, values[name])
        if values.get("source_type") is not None:
            values["source_type"] = SourceType(values["source_type"])
        if values.get("linked_invoice_id") == "":
            values["linked_invoice_id"] = None
        return replace(self, **values)

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in FILTER_FIELDS)

    def matches(self, entry: LedgerEntry) -> bool:
        """Check whether an entry satisfies every active filter."""
        entry_day = entry.transaction_date.date()
        if self.start_date is not None and entry_day < self.start_date:
            return False
        if self.end_date is not None and entry_day > self.end_date:
            return False
        if self.source_type is not None and entry.source_type != self.source_type:
            return False
        if (
            self.linked_invoice_id is not None
            and entry.source_reference_id != self.linked_invoice_id
        ):
            return False
        return True


def compute_total_pages(total_items: int, page_size: int) -> int:
    """ceil(total_items / page_size), never less than 1."""
    if page_size <= 0 or total_items <= 0:
        return 1
    return max(1, math.ceil(total_items / page_size))


@dataclass(frozen=True)
class PaginationCursor:
    """Current page plus the totals derived from the last response."""
    current_page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_pages: int = 1
    total_items: int = 0
    has_next: bool = False
    has_previous: bool = False

    @classmethod
    def initial(cls, page_size: int = DEFAULT_PAGE_SIZE) -> "PaginationCursor":
        return cls(page_size=page_size)

    @classmethod
    def from_response(
        cls,
        page: Optional[int],
        page_size: Optional[int],
        total_count: Optional[int],
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ) -> "PaginationCursor":
        """
        Build a cursor from the server's authoritative page metadata.

        Missing or zero values fall back to page 1, ``default_page_size`` and
        zero items. A missing page size still yields a single total page.
        """
        current_page = page or 1
        total_items = total_count or 0
        total_pages = compute_total_pages(total_items, page_size or 0)
        return cls(
            current_page=current_page,
            page_size=page_size or default_page_size,
            total_pages=total_pages,
            total_items=total_items,
            has_next=current_page < total_pages,
            has_previous=current_page > 1,
        )

    def with_page(self, page: int) -> "PaginationCursor":
        """Move to ``page`` keeping the last known totals."""
        return replace(
            self,
            current_page=page,
            has_next=page < self.total_pages,
            has_previous=page > 1,
        )

    def reset_to_first_page(self) -> "PaginationCursor":
        return self.with_page(1)


@dataclass(frozen=True)
class LoadState:
    """Exactly one loading status at a time, with a message for ERROR."""
    status: LoadingStatus = LoadingStatus.IDLE
    error_message: Optional[str] = None

    @classmethod
    def idle(cls) -> "LoadState":
        return cls()

    @classmethod
    def loading(cls) -> "LoadState":
        return cls(LoadingStatus.LOADING)

    @classmethod
    def loaded(cls) -> "LoadState":
        return cls(LoadingStatus.LOADED)

    @classmethod
    def error(cls, message: str) -> "LoadState":
        return cls(LoadingStatus.ERROR, message)

    @property
    def is_loading(self) -> bool:
        return self.status == LoadingStatus.LOADING

    @property
    def is_error(self) -> bool:
        return self.status == LoadingStatus.ERROR
