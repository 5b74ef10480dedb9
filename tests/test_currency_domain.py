"""Tests for currency codes and CachedRateTable."""

import pytest

from finance_tracker.domain.currency import (
    CURRENCY_NAMES,
    CURRENCY_SYMBOLS,
    SUPPORTED_CURRENCIES,
    CachedRateTable,
    CurrencyCode,
    identity_rate_table,
    parse_currency_code,
)


class TestCurrencyCode:
    def test_supported_order(self):
        assert [c.value for c in SUPPORTED_CURRENCIES] == [
            "USD",
            "EUR",
            "INR",
            "GBP",
            "JPY",
            "AUD",
            "CAD",
        ]

    def test_lookup_tables_cover_every_code(self):
        assert set(CURRENCY_SYMBOLS) == set(CurrencyCode)
        assert set(CURRENCY_NAMES) == set(CurrencyCode)

    def test_code_keys_match_plain_strings(self):
        table = {CurrencyCode.EUR: 0.92}

        assert table["EUR"] == 0.92
        assert CurrencyCode.EUR == "EUR"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("USD", CurrencyCode.USD),
            ("gbp", CurrencyCode.GBP),
            (" jpy ", CurrencyCode.JPY),
            (CurrencyCode.CAD, CurrencyCode.CAD),
            ("CHF", None),
            ("", None),
        ],
    )
    def test_parse_currency_code(self, value, expected):
        assert parse_currency_code(value) == expected

    def test_identity_table(self):
        table = identity_rate_table()

        assert table == {code: 1.0 for code in CurrencyCode}
        assert table is not identity_rate_table()


class TestCachedRateTable:
    def _entry(self, timestamp: int = 1_000) -> CachedRateTable:
        return CachedRateTable(
            base_currency=CurrencyCode.EUR,
            rates={CurrencyCode.EUR: 1.0, CurrencyCode.GBP: 0.86},
            timestamp=timestamp,
        )

    def test_expiry_is_strictly_after_ttl(self):
        entry = self._entry(timestamp=1_000)

        assert not entry.is_expired(now_ms=1_500, ttl_ms=500)
        assert entry.is_expired(now_ms=1_501, ttl_ms=500)
        assert entry.age_ms(1_501) == 501

    def test_to_dict_uses_stored_field_names(self):
        assert self._entry().to_dict() == {
            "baseCurrency": "EUR",
            "rates": {"EUR": 1.0, "GBP": 0.86},
            "timestamp": 1_000,
        }

    def test_from_dict_restores_entry(self):
        entry = self._entry()

        assert CachedRateTable.from_dict(entry.to_dict()) == entry

    def test_from_dict_skips_unknown_currencies(self):
        restored = CachedRateTable.from_dict(
            {"baseCurrency": "USD", "rates": {"USD": 1, "XAU": 0.0005}, "timestamp": 5}
        )

        assert restored.rates == {CurrencyCode.USD: 1.0}

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            {"rates": {}, "timestamp": 1},
            {"baseCurrency": "XXX", "rates": {}, "timestamp": 1},
            {"baseCurrency": "USD", "rates": [], "timestamp": 1},
            {"baseCurrency": "USD", "rates": {"EUR": "0.9"}, "timestamp": 1},
            {"baseCurrency": "USD", "rates": {"EUR": float("nan")}, "timestamp": 1},
            {"baseCurrency": "USD", "rates": {"EUR": float("inf")}, "timestamp": 1},
            {"baseCurrency": "USD", "rates": {"GBP": -2}, "timestamp": 1},
            {"baseCurrency": "USD", "rates": {"JPY": 0}, "timestamp": 1},
            {"baseCurrency": "USD", "rates": {"EUR": True}, "timestamp": 1},
            {"baseCurrency": "USD", "rates": {}, "timestamp": "yesterday"},
            {"baseCurrency": "USD", "rates": {}},
        ],
    )
    def test_from_dict_rejects_malformed_payloads(self, payload):
        with pytest.raises(ValueError):
            CachedRateTable.from_dict(payload)
