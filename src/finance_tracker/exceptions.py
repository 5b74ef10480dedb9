"""Exception hierarchy for Finance Tracker.

All application exceptions inherit from FinanceTrackerError. The currency
conversion path catches its own errors and degrades to fallback values;
these types exist so the failure can be logged and tested precisely.
"""

from typing import Any


class FinanceTrackerError(Exception):
    """Base exception for all Finance Tracker errors.

    Includes optional error_code for API responses and extra context.
    """

    error_code: str = "FT_ERROR"
    status_code: int = 500

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Currency Errors
# =============================================================================


class CurrencyError(FinanceTrackerError):
    """Base exception for currency-related errors."""

    error_code = "CURRENCY_ERROR"
    status_code = 400


class InvalidCurrencyError(CurrencyError):
    """Raised when an unsupported currency code is provided."""

    error_code = "INVALID_CURRENCY"
    status_code = 422

    def __init__(self, currency_code: str) -> None:
        super().__init__(
            f"Invalid currency code: {currency_code}",
            context={"currency_code": currency_code},
        )


# =============================================================================
# Exchange Rate Errors
# =============================================================================


class ExchangeRateError(FinanceTrackerError):
    """Base exception for exchange rate errors."""

    error_code = "EXCHANGE_RATE_ERROR"
    status_code = 502


class RateProviderError(ExchangeRateError):
    """Raised when the remote rate provider cannot supply a rate table."""

    error_code = "RATE_PROVIDER_ERROR"

    def __init__(
        self,
        message: str,
        *,
        base_currency: str,
        upstream_status: int | None = None,
    ) -> None:
        context: dict[str, Any] = {"base_currency": base_currency}
        if upstream_status is not None:
            context["upstream_status"] = upstream_status
        super().__init__(
            f"Failed to fetch exchange rates: {message}", context=context
        )
        self.upstream_status = upstream_status


# =============================================================================
# Rate Cache Errors
# =============================================================================


class RateCacheError(FinanceTrackerError):
    """Base exception for rate cache storage errors."""

    error_code = "RATE_CACHE_ERROR"
    status_code = 500


class RateCacheCorruptedError(RateCacheError):
    """Raised when the stored cache payload cannot be decoded."""

    error_code = "RATE_CACHE_CORRUPTED"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Cached rates under '{key}' are unreadable: {reason}",
            context={"key": key, "reason": reason},
        )


class RateCacheWriteError(RateCacheError):
    """Raised when the cache slot cannot be written."""

    error_code = "RATE_CACHE_WRITE_ERROR"

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Could not write cached rates under '{key}': {reason}",
            context={"key": key, "reason": reason},
        )


# =============================================================================
# Backend Errors
# =============================================================================


class BackendError(FinanceTrackerError):
    """Base exception for hosted backend errors."""

    error_code = "BACKEND_ERROR"
    status_code = 502


class BackendAPIError(BackendError):
    """Raised when the hosted backend answers with a non-success status."""

    error_code = "BACKEND_API_ERROR"

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(
            f"Backend API error {status_code}: {detail}",
            context={"upstream_status": status_code, "detail": detail},
        )
        self.upstream_status = status_code
        self.detail = detail


class ProfileNotFoundError(BackendError):
    """Raised when no profile exists for a user."""

    error_code = "PROFILE_NOT_FOUND"
    status_code = 404

    def __init__(self, user_id: str) -> None:
        super().__init__(
            f"Profile not found: {user_id}",
            context={"user_id": user_id},
        )
