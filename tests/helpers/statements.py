"""
Builders for statements and a fetcher whose responses the test releases.
"""

import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ledger_view.models import LedgerEntry, SourceType, StatementSnapshot


def make_entry(
    entry_id: str,
    day: int = 1,
    source_type: SourceType = SourceType.RIDE_CHARGE,
    reference: Optional[str] = None,
    debit: str = "0",
    credit: str = "0",
) -> LedgerEntry:
    return LedgerEntry(
        id=entry_id,
        transaction_date=datetime(2024, 3, day, 10, 0, tzinfo=timezone.utc),
        ledger_account="AccountsReceivable",
        debit_amount=Decimal(debit),
        credit_amount=Decimal(credit),
        description=f"Entry {entry_id}",
        source_type=source_type,
        source_reference_id=reference,
    )


def make_statement(
    page: int = 1,
    page_size: int = 50,
    total_count: int = 0,
    entries: Optional[List[LedgerEntry]] = None,
    account_id: str = "A1",
    opening: str = "0",
    closing: str = "0",
) -> StatementSnapshot:
    if entries is None:
        count = max(0, min(page_size, total_count - (page - 1) * page_size))
        entries = [make_entry(f"{account_id}-p{page}-{i}") for i in range(count)]
    return StatementSnapshot(
        account_id=account_id,
        account_name=f"Account {account_id}",
        opening_balance=Decimal(opening),
        closing_balance=Decimal(closing),
        entries=tuple(entries),
        total_count=total_count,
        page=page,
        page_size=page_size,
    )


class ControlledFetcher:
    """
    Statement fetcher that parks every call on a future.

    Tests release calls out of order with ``resolve``/``fail`` to drive the
    stale-response rules.
    """

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self._futures: List[asyncio.Future] = []

    async def fetch(
        self,
        tenant_id,
        account_id,
        page,
        page_size,
        start_date=None,
        end_date=None,
        source_type=None,
        linked_invoice_id=None,
    ) -> StatementSnapshot:
        self.calls.append({
            "tenant_id": tenant_id,
            "account_id": account_id,
            "page": page,
            "page_size": page_size,
            "start_date": start_date,
            "end_date": end_date,
            "source_type": source_type,
            "linked_invoice_id": linked_invoice_id,
        })
        future = asyncio.get_running_loop().create_future()
        self._futures.append(future)
        return await future

    def resolve(self, index: int, statement: StatementSnapshot) -> None:
        self._futures[index].set_result(statement)

    def fail(self, index: int, error: Exception) -> None:
        self._futures[index].set_exception(error)


async def drain() -> None:
    """Let scheduled load tasks run up to their first await."""
    for _ in range(3):
        await asyncio.sleep(0)
