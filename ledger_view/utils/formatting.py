"""Display helpers for ledger rows."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional, Union

from ..models import LedgerEntry, SourceType

Amount = Union[Decimal, int, float]


def format_currency_decimal(amount: Optional[Amount]) -> str:
    """
    Format a decimal dollar amount, e.g. ``540`` -> ``"$540.00"`` and
    ``-150.75`` -> ``"-$150.75"``. None is shown as ``"$0.00"``.
    """
    if amount is None:
        return "$0.00"

    value = Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if value < 0:
        return f"-${abs(value)}"
    return f"${abs(value)}"


def format_entry_row(entry: LedgerEntry) -> Dict[str, str]:
    """Flatten a ledger entry into display strings."""
    source_type = entry.source_type
    if isinstance(source_type, SourceType):
        source_type = source_type.value

    return {
        "id": entry.id,
        "date": entry.transaction_date.strftime("%Y-%m-%d"),
        "ledger_account": entry.ledger_account,
        "description": entry.description,
        "debit": format_currency_decimal(entry.debit_amount) if entry.debit_amount else "",
        "credit": format_currency_decimal(entry.credit_amount) if entry.credit_amount else "",
        "source_type": source_type,
        "source_reference_id": entry.source_reference_id or "",
    }
