"""Currency conversion with a cached, base-relative exchange rate table.

Rates are fetched for one base currency at a time and kept in a single
cache slot. Conversion and formatting never raise: a provider outage falls
back to the last cached table (any base, any age) and then to a neutral
table that maps every currency to 1.0.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

import httpx

from finance_tracker.domain.currency import (
    CURRENCY_SYMBOLS,
    SUPPORTED_CURRENCIES,
    CachedRateTable,
    CurrencyCode,
    RateTable,
    identity_rate_table,
    is_usable_rate,
    parse_currency_code,
)
from finance_tracker.exceptions import (
    InvalidCurrencyError,
    RateCacheError,
    RateCacheWriteError,
    RateProviderError,
)
from finance_tracker.logging_config import get_logger
from finance_tracker.repositories.interfaces import RateCacheStore
from finance_tracker.services.rate_provider import ProviderRates, RateProvider

logger = get_logger(__name__)

DEFAULT_CACHE_TTL_MS = 60 * 60 * 1000

CENT = Decimal("0.01")


def _now_ms() -> int:
    return int(time.time() * 1000)


class RateSource(str, Enum):
    """Where a rate table handed to a caller came from."""

    CACHE = "cache"
    PROVIDER = "provider"
    STALE_CACHE = "stale_cache"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class RateFetchOutcome:
    rates: RateTable
    source: RateSource
    base_currency: CurrencyCode

    @property
    def degraded(self) -> bool:
        """True when the table is not a current answer for the requested base."""
        return self.source in (RateSource.STALE_CACHE, RateSource.DEFAULT)


def get_currency_symbol(currency_code: CurrencyCode | str) -> str:
    code = parse_currency_code(currency_code)
    if code is None:
        return str(currency_code)
    return CURRENCY_SYMBOLS[code]


def format_currency(amount: float, currency_code: CurrencyCode | str) -> str:
    """Format ``amount`` as e.g. ``$1,234.56`` or ``-€12.00``.

    Cents round half away from zero on the exact binary value, so 0.125
    shows as 0.13 while 2.675 (stored as 2.67499...) shows as 2.67.
    """
    symbol = get_currency_symbol(currency_code)
    if math.isfinite(amount):
        cents = Decimal(abs(amount)).quantize(CENT, rounding=ROUND_HALF_UP)
        formatted = f"{cents:,.2f}"
    else:
        formatted = f"{abs(amount):,.2f}"
    if amount < 0:
        return f"-{symbol}{formatted}"
    return f"{symbol}{formatted}"


def convert_amount(
    amount: float,
    from_currency: CurrencyCode | str,
    to_currency: CurrencyCode | str,
    rates: Mapping[CurrencyCode | str, float],
) -> float:
    """Convert through a base-relative rate table.

    Same-currency conversion returns ``amount`` untouched. A currency missing
    from ``rates``, or mapped to a zero, negative or non-finite rate, logs a
    warning and also returns ``amount``.
    """
    if from_currency == to_currency:
        return amount

    from_rate = rates.get(from_currency)
    to_rate = rates.get(to_currency)

    if not is_usable_rate(from_rate) or not is_usable_rate(to_rate):
        logger.warning(
            "exchange_rate_missing",
            from_currency=str(getattr(from_currency, "value", from_currency)),
            to_currency=str(getattr(to_currency, "value", to_currency)),
        )
        return amount

    return (amount / from_rate) * to_rate


class CurrencyConversionService:
    def __init__(
        self,
        provider: RateProvider,
        store: RateCacheStore,
        ttl_ms: int = DEFAULT_CACHE_TTL_MS,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._provider = provider
        self._store = store
        self._ttl_ms = ttl_ms
        self._clock = clock

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    @property
    def store(self) -> RateCacheStore:
        return self._store

    def fetch_rates(self, base_currency: CurrencyCode | str) -> RateTable:
        return self.fetch_rates_with_status(base_currency).rates

    def fetch_rates_with_status(
        self, base_currency: CurrencyCode | str
    ) -> RateFetchOutcome:
        base = parse_currency_code(base_currency)
        if base is None:
            raise InvalidCurrencyError(str(base_currency))

        cached = self._peek()
        if (
            cached is not None
            and cached.base_currency == base
            and not cached.is_expired(self._clock(), self._ttl_ms)
        ):
            logger.debug("exchange_rates_cache_hit", base_currency=base.value)
            return RateFetchOutcome(cached.rates, RateSource.CACHE, base)

        targets = [code for code in SUPPORTED_CURRENCIES if code != base]
        try:
            payload = self._provider.fetch_latest(base, targets)
        except (RateProviderError, httpx.HTTPError) as e:
            return self._fallback(base, cached, e)

        rates = self._build_table(base, payload)
        self._write(CachedRateTable(base_currency=base, rates=rates, timestamp=self._clock()))
        logger.info(
            "exchange_rates_fetched",
            base_currency=base.value,
            rate_date=payload.date,
        )
        return RateFetchOutcome(rates, RateSource.PROVIDER, base)

    def get_cached_rates(self) -> CachedRateTable | None:
        cached = self._peek()
        if cached is None:
            return None

        if cached.is_expired(self._clock(), self._ttl_ms):
            logger.info(
                "rate_cache_expired",
                base_currency=cached.base_currency.value,
                age_ms=cached.age_ms(self._clock()),
            )
            self._evict()
            return None

        return cached

    def peek_cached_rates(self) -> CachedRateTable | None:
        """Like get_cached_rates, but an expired entry stays in the slot."""
        cached = self._peek()
        if cached is None or cached.is_expired(self._clock(), self._ttl_ms):
            return None
        return cached

    def clear_cache(self) -> None:
        self._store.clear()
        logger.info("rate_cache_cleared")

    def convert(
        self,
        amount: float,
        from_currency: CurrencyCode | str,
        to_currency: CurrencyCode | str,
        rates: Mapping[CurrencyCode | str, float],
    ) -> float:
        return convert_amount(amount, from_currency, to_currency, rates)

    def format_currency(self, amount: float, currency_code: CurrencyCode | str) -> str:
        return format_currency(amount, currency_code)

    def _peek(self) -> CachedRateTable | None:
        """Read the slot without applying the TTL."""
        try:
            return self._store.load()
        except RateCacheError as e:
            logger.warning("rate_cache_corrupted", error_code=e.error_code, **e.context)
            self._evict()
            return None

    def _evict(self) -> None:
        try:
            self._store.clear()
        except RateCacheError as e:
            logger.error("rate_cache_evict_failed", **e.context)

    def _write(self, entry: CachedRateTable) -> None:
        try:
            self._store.save(entry)
        except RateCacheWriteError as e:
            logger.error("rate_cache_write_failed", **e.context)

    def _build_table(self, base: CurrencyCode, payload: ProviderRates) -> RateTable:
        rates: RateTable = {}
        for code in SUPPORTED_CURRENCIES:
            rate = payload.rates.get(code.value)
            if is_usable_rate(rate):
                rates[code] = rate
        # The provider never returns the identity rate
        rates[base] = 1.0
        return rates

    def _fallback(
        self,
        base: CurrencyCode,
        cached: CachedRateTable | None,
        error: Exception,
    ) -> RateFetchOutcome:
        if cached is not None:
            logger.warning(
                "stale_exchange_rates_used",
                requested_base=base.value,
                cached_base=cached.base_currency.value,
                age_ms=cached.age_ms(self._clock()),
                error=str(error),
            )
            return RateFetchOutcome(cached.rates, RateSource.STALE_CACHE, base)

        logger.warning(
            "default_exchange_rates_used",
            requested_base=base.value,
            error=str(error),
        )
        return RateFetchOutcome(identity_rate_table(), RateSource.DEFAULT, base)
