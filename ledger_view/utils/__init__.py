"""Utility modules."""

from .formatting import format_currency_decimal, format_entry_row
from .log_config import configure_logging

__all__ = ["format_currency_decimal", "format_entry_row", "configure_logging"]
