"""
Tests for filter, pagination and loading-state models.
"""

import pytest
from datetime import date, datetime

from ledger_view.models import (
    FilterSet,
    LedgerEntry,
    LoadingStatus,
    LoadState,
    PaginationCursor,
    SourceType,
    compute_total_pages,
)
from tests.helpers.statements import make_entry


@pytest.mark.parametrize("page_size", [1, 50])
@pytest.mark.parametrize("total_items", [0, 1, 49, 50, 51, 1000])
def test_total_pages_is_ceiling_with_floor_of_one(total_items, page_size):
    expected = max(1, -(-total_items // page_size))
    assert compute_total_pages(total_items, page_size) == expected


def test_total_pages_zero_page_size():
    assert compute_total_pages(120, 0) == 1


class TestPaginationCursor:
    """Test suite for PaginationCursor."""

    def test_initial_defaults(self):
        cursor = PaginationCursor.initial()

        assert cursor.current_page == 1
        assert cursor.page_size == 50
        assert cursor.total_pages == 1
        assert cursor.total_items == 0
        assert not cursor.has_next
        assert not cursor.has_previous

    def test_from_response_first_of_three_pages(self):
        cursor = PaginationCursor.from_response(page=1, page_size=50, total_count=120)

        assert cursor.current_page == 1
        assert cursor.total_pages == 3
        assert cursor.total_items == 120
        assert cursor.has_next
        assert not cursor.has_previous

    @pytest.mark.parametrize("page", [1, 2, 3])
    def test_from_response_flags_follow_page(self, page):
        cursor = PaginationCursor.from_response(page=page, page_size=50, total_count=120)

        assert cursor.has_next == (cursor.current_page < cursor.total_pages)
        assert cursor.has_previous == (cursor.current_page > 1)

    def test_from_response_missing_values(self):
        cursor = PaginationCursor.from_response(
            page=None, page_size=0, total_count=None, default_page_size=25
        )

        assert cursor.current_page == 1
        assert cursor.page_size == 25
        assert cursor.total_pages == 1
        assert cursor.total_items == 0

    def test_with_page_keeps_totals(self):
        cursor = PaginationCursor.from_response(page=1, page_size=50, total_count=120)

        moved = cursor.with_page(3)

        assert moved.current_page == 3
        assert moved.total_pages == 3
        assert not moved.has_next
        assert moved.has_previous
        assert cursor.current_page == 1  # original untouched

    def test_reset_to_first_page_preserves_page_size(self):
        cursor = PaginationCursor.from_response(page=3, page_size=20, total_count=100)

        reset = cursor.reset_to_first_page()

        assert reset.current_page == 1
        assert reset.page_size == 20
        assert not reset.has_previous


class TestFilterSet:
    """Test suite for FilterSet."""

    def test_merge_keeps_unmentioned_fields(self):
        filters = FilterSet(start_date=date(2024, 3, 1))

        merged = filters.merge({"source_type": "Payment"})

        assert merged.start_date == date(2024, 3, 1)
        assert merged.source_type is SourceType.PAYMENT
        assert filters.source_type is None

    def test_merge_none_clears_field(self):
        filters = FilterSet(start_date=date(2024, 3, 1), linked_invoice_id="INV-1")

        merged = filters.merge({"linked_invoice_id": None})

        assert merged.linked_invoice_id is None
        assert merged.start_date == date(2024, 3, 1)

    def test_merge_empty_invoice_is_absent(self):
        assert FilterSet().merge({"linked_invoice_id": ""}).linked_invoice_id is None

    def test_merge_rejects_unknown_field(self):
        with pytest.raises(ValueError):
            FilterSet().merge({"amount": 10})

    def test_merge_rejects_unknown_source_type(self):
        with pytest.raises(ValueError):
            FilterSet().merge({"source_type": "Refund"})

    def test_merge_parses_iso_date_strings(self):
        merged = FilterSet().merge({"start_date": "2024-03-01", "end_date": " 2024-03-31 "})

        assert merged.start_date == date(2024, 3, 1)
        assert merged.end_date == date(2024, 3, 31)
        assert merged.matches(make_entry("e1", day=15))

    def test_merge_datetime_uses_its_day(self):
        merged = FilterSet().merge({"end_date": datetime(2024, 3, 10, 23, 59)})

        assert merged.end_date == date(2024, 3, 10)

    @pytest.mark.parametrize("value", ["03/01/2024", "not-a-date", 20240301])
    def test_merge_rejects_malformed_dates(self, value):
        with pytest.raises(ValueError):
            FilterSet().merge({"start_date": value})

    def test_is_empty(self):
        assert FilterSet().is_empty
        assert not FilterSet(source_type=SourceType.PAYMENT).is_empty

    def test_matches_inclusive_date_range(self):
        filters = FilterSet(start_date=date(2024, 3, 5), end_date=date(2024, 3, 10))

        assert filters.matches(make_entry("e1", day=5))
        assert filters.matches(make_entry("e2", day=10))
        assert not filters.matches(make_entry("e3", day=4))
        assert not filters.matches(make_entry("e4", day=11))

    def test_matches_source_type_and_invoice(self):
        filters = FilterSet(source_type=SourceType.PAYMENT, linked_invoice_id="INV-7")

        assert filters.matches(make_entry("e1", source_type=SourceType.PAYMENT, reference="INV-7"))
        assert not filters.matches(make_entry("e2", source_type=SourceType.PAYMENT, reference="INV-8"))
        assert not filters.matches(make_entry("e3", source_type=SourceType.RIDE_CHARGE, reference="INV-7"))


class TestLoadState:
    """Test suite for LoadState."""

    def test_error_carries_message(self):
        state = LoadState.error("boom")

        assert state.status == LoadingStatus.ERROR
        assert state.is_error
        assert state.error_message == "boom"

    def test_non_error_states_have_no_message(self):
        for state in (LoadState.idle(), LoadState.loading(), LoadState.loaded()):
            assert state.error_message is None
            assert not state.is_error

        assert LoadState.loading().is_loading


def test_ledger_entry_requires_source_type():
    with pytest.raises(TypeError):
        LedgerEntry(id="e1", transaction_date=datetime(2024, 3, 1))
