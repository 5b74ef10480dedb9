from finance_tracker.domain.currency import (
    CURRENCY_NAMES,
    CURRENCY_SYMBOLS,
    SUPPORTED_CURRENCIES,
    CachedRateTable,
    CurrencyCode,
    RateTable,
)

__all__ = [
    "CURRENCY_NAMES",
    "CURRENCY_SYMBOLS",
    "SUPPORTED_CURRENCIES",
    "CachedRateTable",
    "CurrencyCode",
    "RateTable",
]

__version__ = "0.1.0"
