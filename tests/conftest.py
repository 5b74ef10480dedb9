import logging
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from finance_tracker.domain.currency import CurrencyCode
from finance_tracker.repositories.memory import InMemoryRateCacheStore
from finance_tracker.repositories.sqlite import SQLiteDatabase, SQLiteRateCacheStore
from finance_tracker.services.currency import CurrencyConversionService
from finance_tracker.services.rate_provider import FrankfurterRateProvider

PROVIDER_URL = "https://rates.test/latest"

USD_RATES = {"EUR": 0.92, "INR": 83.12, "GBP": 0.79, "JPY": 149.5, "AUD": 1.52, "CAD": 1.36}


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


class RateServer:
    """httpx.MockTransport handler standing in for the rate provider."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.rates_by_base: dict[str, dict[str, float]] = {"USD": dict(USD_RATES)}
        self.status_code = 200
        self.body: Any = None
        self.fail_with: Exception | None = None

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"message": "unavailable"})
        if self.body is not None:
            return httpx.Response(200, json=self.body)

        base = request.url.params["from"]
        targets = request.url.params["to"].split(",")
        rates = self.rates_by_base.get(base, {})
        return httpx.Response(
            200,
            json={
                "amount": 1.0,
                "base": base,
                "date": "2024-01-15",
                "rates": {code: rates[code] for code in targets if code in rates},
            },
        )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_server() -> RateServer:
    return RateServer()


@pytest.fixture
def provider(rate_server: RateServer) -> FrankfurterRateProvider:
    client = httpx.Client(transport=httpx.MockTransport(rate_server))
    return FrankfurterRateProvider(url=PROVIDER_URL, client=client)


@pytest.fixture
def memory_store() -> InMemoryRateCacheStore:
    return InMemoryRateCacheStore()


@pytest.fixture
def db() -> Iterator[SQLiteDatabase]:
    """Create an in-memory SQLite database for testing."""
    database = SQLiteDatabase(":memory:")
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def sqlite_store(db: SQLiteDatabase) -> SQLiteRateCacheStore:
    return SQLiteRateCacheStore(db)


@pytest.fixture
def currency_service(
    provider: FrankfurterRateProvider,
    memory_store: InMemoryRateCacheStore,
    clock: FakeClock,
) -> CurrencyConversionService:
    return CurrencyConversionService(provider=provider, store=memory_store, clock=clock)


@pytest.fixture
def log_output(capsys, caplog) -> Callable[[], str]:
    """Everything logged so far, whether structlog printed it or routed it
    through the standard library."""
    caplog.set_level(logging.DEBUG)

    def read() -> str:
        captured = capsys.readouterr()
        return captured.out + captured.err + caplog.text

    return read


@pytest.fixture
def usd_table() -> dict[CurrencyCode, float]:
    return {CurrencyCode.USD: 1.0, **{CurrencyCode(k): v for k, v in USD_RATES.items()}}
