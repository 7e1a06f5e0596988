"""Statement models returned by the statements API."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple, Union

from .enums import SourceType


@dataclass(frozen=True)
class LedgerEntry:
    """
    One transaction line in an account statement.
    Amounts are non-negative decimals in USD; identity is ``id``.
    """
    id: str
    transaction_date: datetime
    # Unknown server values are kept as plain strings
    source_type: Union[SourceType, str]
    ledger_account: str = ""  # e.g. "AccountsReceivable", "ServiceRevenue", "Cash"
    debit_amount: Decimal = Decimal("0")
    credit_amount: Decimal = Decimal("0")
    description: str = ""
    source_reference_id: Optional[str] = None

    @property
    def is_charge(self) -> bool:
        return self.source_type == SourceType.RIDE_CHARGE

    @property
    def net_amount(self) -> Decimal:
        """Debit minus credit."""
        return self.debit_amount - self.credit_amount


@dataclass(frozen=True)
class StatementSnapshot:
    """A bounded, paginated window over an account's ledger plus balances."""
    account_id: str
    account_name: str = ""
    opening_balance: Decimal = Decimal("0")
    closing_balance: Decimal = Decimal("0")

    # Server-defined order, preserved
    entries: Tuple[LedgerEntry, ...] = field(default_factory=tuple)

    total_count: int = 0
    page: int = 1
    page_size: int = 50

    period_start: Optional[date] = None
    period_end: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return not self.entries
