from finance_tracker.domain.currency import (
    CURRENCY_NAMES,
    CURRENCY_SYMBOLS,
    SUPPORTED_CURRENCIES,
    CachedRateTable,
    CurrencyCode,
    RateTable,
    identity_rate_table,
    is_usable_rate,
    parse_currency_code,
)
from finance_tracker.domain.records import HoldingKind, MonetaryRow, UserProfile

__all__ = [
    "CURRENCY_NAMES",
    "CURRENCY_SYMBOLS",
    "SUPPORTED_CURRENCIES",
    "CachedRateTable",
    "CurrencyCode",
    "HoldingKind",
    "MonetaryRow",
    "RateTable",
    "UserProfile",
    "identity_rate_table",
    "is_usable_rate",
    "parse_currency_code",
]
