from finance_tracker.services.currency import (
    CurrencyConversionService,
    RateFetchOutcome,
    RateSource,
    convert_amount,
    format_currency,
    get_currency_symbol,
)
from finance_tracker.services.display_currency import (
    DisplayAmount,
    DisplayCurrencyState,
    Notification,
    NotificationLevel,
)
from finance_tracker.services.financial_summary import (
    FinancialSummary,
    FinancialSummaryService,
)
from finance_tracker.services.rate_provider import (
    FrankfurterRateProvider,
    ProviderRates,
    RateProvider,
)

__all__ = [
    "CurrencyConversionService",
    "DisplayAmount",
    "DisplayCurrencyState",
    "FinancialSummary",
    "FinancialSummaryService",
    "FrankfurterRateProvider",
    "Notification",
    "NotificationLevel",
    "ProviderRates",
    "RateFetchOutcome",
    "RateProvider",
    "RateSource",
    "convert_amount",
    "format_currency",
    "get_currency_symbol",
]
