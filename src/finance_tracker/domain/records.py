"""Records read from the hosted backend.

These are consumed only as plain values; the backend owns their schema.
"""

from dataclasses import dataclass
from enum import Enum


class HoldingKind(str, Enum):
    ASSET = "asset"
    LIABILITY = "liability"
    BANK_ACCOUNT = "bank_account"


@dataclass(frozen=True, slots=True)
class UserProfile:
    id: str
    preferred_currency: str | None = None


@dataclass(frozen=True, slots=True)
class MonetaryRow:
    """An ``(amount, currency)`` pair taken from any money-bearing table."""

    amount: float
    currency: str
