"""Remote exchange rate provider client."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

import httpx
from pydantic import BaseModel, ValidationError

from finance_tracker.domain.currency import CurrencyCode
from finance_tracker.exceptions import RateProviderError
from finance_tracker.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PROVIDER_URL = "https://api.frankfurter.app/latest"


class ProviderRates(BaseModel):
    """Success payload of the latest-rates endpoint."""

    base: str
    date: str
    rates: dict[str, float]


class RateProvider(ABC):
    @abstractmethod
    def fetch_latest(
        self, base: CurrencyCode, targets: Sequence[CurrencyCode]
    ) -> ProviderRates:
        """Fetch rates from ``base`` to each of ``targets``.

        Raises:
            RateProviderError: On transport failure, non-2xx status or a
                payload that does not match ProviderRates.
        """
        pass


class FrankfurterRateProvider(RateProvider):
    """Client for the public Frankfurter API (no API key required)."""

    def __init__(
        self,
        url: str = DEFAULT_PROVIDER_URL,
        client: httpx.Client | None = None,
        timeout: float | None = 5.0,
    ) -> None:
        self._url = url
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    @property
    def url(self) -> str:
        return self._url

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> FrankfurterRateProvider:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def fetch_latest(
        self, base: CurrencyCode, targets: Sequence[CurrencyCode]
    ) -> ProviderRates:
        params = {
            "from": base.value,
            "to": ",".join(code.value for code in targets),
        }
        try:
            r = self._client.get(self._url, params=params)
        except httpx.HTTPError as e:
            raise RateProviderError(str(e), base_currency=base.value) from e

        if not r.is_success:
            raise RateProviderError(
                r.reason_phrase or f"HTTP {r.status_code}",
                base_currency=base.value,
                upstream_status=r.status_code,
            )

        try:
            payload = ProviderRates.model_validate_json(r.content)
        except ValidationError as e:
            raise RateProviderError(
                f"malformed response ({e.error_count()} errors)",
                base_currency=base.value,
                upstream_status=r.status_code,
            ) from e

        logger.debug(
            "provider_rates_received",
            base_currency=payload.base,
            rate_date=payload.date,
            currencies=sorted(payload.rates),
        )
        return payload
