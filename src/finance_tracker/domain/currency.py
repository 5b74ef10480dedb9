"""Currency codes and exchange rate table value objects."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeGuard


class CurrencyCode(str, Enum):
    USD = "USD"
    EUR = "EUR"
    INR = "INR"
    GBP = "GBP"
    JPY = "JPY"
    AUD = "AUD"
    CAD = "CAD"


SUPPORTED_CURRENCIES: tuple[CurrencyCode, ...] = tuple(CurrencyCode)

CURRENCY_SYMBOLS: dict[CurrencyCode, str] = {
    CurrencyCode.USD: "$",
    CurrencyCode.EUR: "€",
    CurrencyCode.INR: "₹",
    CurrencyCode.GBP: "£",
    CurrencyCode.JPY: "¥",
    CurrencyCode.AUD: "A$",
    CurrencyCode.CAD: "C$",
}

CURRENCY_NAMES: dict[CurrencyCode, str] = {
    CurrencyCode.USD: "US Dollar",
    CurrencyCode.EUR: "Euro",
    CurrencyCode.INR: "Indian Rupee",
    CurrencyCode.GBP: "British Pound",
    CurrencyCode.JPY: "Japanese Yen",
    CurrencyCode.AUD: "Australian Dollar",
    CurrencyCode.CAD: "Canadian Dollar",
}

for _table in (CURRENCY_SYMBOLS, CURRENCY_NAMES):
    _missing = set(CurrencyCode) - set(_table)
    if _missing:  # pragma: no cover
        raise RuntimeError(f"Currency lookup table incomplete: {sorted(_missing)}")

# Rates relative to one implicit base currency whose own entry is 1.0.
RateTable = dict[CurrencyCode, float]


def parse_currency_code(value: "CurrencyCode | str") -> CurrencyCode | None:
    """Return the CurrencyCode for ``value`` or None when unsupported."""
    if isinstance(value, CurrencyCode):
        return value
    try:
        return CurrencyCode(str(value).strip().upper())
    except ValueError:
        return None


def is_usable_rate(rate: object) -> TypeGuard[float]:
    """A rate can be divided by and multiplied into money: finite and > 0."""
    if isinstance(rate, bool) or not isinstance(rate, (int, float)):
        return False
    return math.isfinite(rate) and rate > 0


def identity_rate_table() -> RateTable:
    """Return a table mapping every supported currency to 1.0."""
    return {code: 1.0 for code in SUPPORTED_CURRENCIES}


@dataclass(frozen=True, slots=True)
class CachedRateTable:
    """A rate table together with the base it was fetched for.

    ``timestamp`` is the fetch time in epoch milliseconds.
    """

    base_currency: CurrencyCode
    rates: RateTable
    timestamp: int

    def age_ms(self, now_ms: int) -> int:
        return now_ms - self.timestamp

    def is_expired(self, now_ms: int, ttl_ms: int) -> bool:
        return self.age_ms(now_ms) > ttl_ms

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseCurrency": self.base_currency.value,
            "rates": {code.value: rate for code, rate in self.rates.items()},
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CachedRateTable":
        """Rebuild a cached table from its stored JSON form.

        Raises:
            ValueError: If the payload does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise ValueError("cached rates payload must be an object")

        base = parse_currency_code(data.get("baseCurrency", ""))
        if base is None:
            raise ValueError(f"unsupported base currency: {data.get('baseCurrency')!r}")

        raw_rates = data.get("rates")
        if not isinstance(raw_rates, dict):
            raise ValueError("cached rates must be an object")

        rates: RateTable = {}
        for raw_code, raw_rate in raw_rates.items():
            code = parse_currency_code(raw_code)
            if code is None:
                continue
            if not is_usable_rate(raw_rate):
                raise ValueError(f"rate for {raw_code} is not a positive number: {raw_rate!r}")
            rates[code] = float(raw_rate)

        timestamp = data.get("timestamp")
        if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
            raise ValueError("cached timestamp is not a number")

        return cls(base_currency=base, rates=rates, timestamp=int(timestamp))
