"""Enumerations for the ledger view."""

from enum import Enum


class SourceType(str, Enum):
    """
    Origin of a ledger entry.

    RIDE_CHARGE: Debit entry from a completed ride (increases amount owed)
    PAYMENT: Credit entry from a customer payment (decreases amount owed)
    """
    RIDE_CHARGE = "RideCharge"
    PAYMENT = "Payment"


class LoadingStatus(str, Enum):
    """Status of the ledger fetch orchestration."""
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"
