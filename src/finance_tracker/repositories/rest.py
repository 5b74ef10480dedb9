"""HTTP client for the hosted REST backend.

The backend exposes each table at ``/rest/v1/<table>`` and applies
row-level authorization server side. Filters use the ``column=eq.value``
query syntax.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import httpx

from finance_tracker.domain.records import HoldingKind, MonetaryRow, UserProfile
from finance_tracker.exceptions import BackendAPIError, ProfileNotFoundError
from finance_tracker.logging_config import get_logger
from finance_tracker.repositories.interfaces import (
    HoldingsRepository,
    ProfileRepository,
)

logger = get_logger(__name__)

REST_PREFIX = "/rest/v1"


def _eq_filters(filters: dict[str, Any] | None) -> dict[str, str]:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


def _handle_response(response: httpx.Response) -> Any:
    if response.status_code >= 400:
        try:
            payload = response.json()
            detail = payload.get("message") or payload.get("detail") or response.text
        except (ValueError, AttributeError):
            detail = response.text
        raise BackendAPIError(response.status_code, str(detail))
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        # A proxy or captive portal answering 200 with an HTML page
        raise BackendAPIError(
            response.status_code, f"response is not JSON: {response.text[:200]}"
        ) from e


class RestQueryClient:
    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        access_token: str | None = None,
        client: httpx.Client | None = None,
        timeout: float | None = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        headers: dict[str, str] = {}
        if api_key:
            headers["apikey"] = api_key
        token = access_token or api_key
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = (
            client
            if client is not None
            else httpx.Client(
                base_url=base_url, headers=headers, timeout=timeout, transport=transport
            )
        )
        self._base_url = base_url

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RestQueryClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def select(
        self,
        table: str,
        columns: Iterable[str] = ("*",),
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        params = {"select": ",".join(columns), **_eq_filters(filters)}
        r = self._client.get(f"{REST_PREFIX}/{table}", params=params)
        data = _handle_response(r)
        return data if isinstance(data, list) else []

    def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: dict[str, Any],
    ) -> list[dict[str, Any]]:
        r = self._client.patch(
            f"{REST_PREFIX}/{table}",
            params=_eq_filters(filters),
            json=values,
            headers={"Prefer": "return=representation"},
        )
        data = _handle_response(r)
        return data if isinstance(data, list) else []


class RestProfileRepository(ProfileRepository):
    TABLE = "profiles"

    def __init__(self, client: RestQueryClient) -> None:
        self._client = client

    def get_profile(self, user_id: str) -> UserProfile | None:
        rows = self._client.select(
            self.TABLE, columns=("id", "preferred_currency"), filters={"id": user_id}
        )
        if not rows:
            return None
        return self._row_to_profile(rows[0])

    def update_preferred_currency(self, user_id: str, currency: str) -> UserProfile:
        rows = self._client.update(
            self.TABLE, {"preferred_currency": currency}, filters={"id": user_id}
        )
        if not rows:
            raise ProfileNotFoundError(user_id)
        logger.info("preferred_currency_saved", user_id=user_id, currency=currency)
        return self._row_to_profile(rows[0])

    def _row_to_profile(self, row: dict[str, Any]) -> UserProfile:
        return UserProfile(
            id=str(row["id"]),
            preferred_currency=row.get("preferred_currency"),
        )


class RestHoldingsRepository(HoldingsRepository):
    # (table, amount column) per holding kind
    SOURCES: dict[HoldingKind, tuple[str, str]] = {
        HoldingKind.ASSET: ("assets", "valuation"),
        HoldingKind.LIABILITY: ("liabilities", "valuation"),
        HoldingKind.BANK_ACCOUNT: ("bank_accounts", "balance"),
    }

    def __init__(self, client: RestQueryClient) -> None:
        self._client = client

    def list_rows(self, kind: HoldingKind, user_id: str) -> Iterable[MonetaryRow]:
        table, amount_column = self.SOURCES[kind]
        rows = self._client.select(
            table, columns=(amount_column, "currency"), filters={"user_id": user_id}
        )
        return [
            MonetaryRow(
                amount=float(row.get(amount_column) or 0),
                currency=str(row.get("currency") or ""),
            )
            for row in rows
        ]
