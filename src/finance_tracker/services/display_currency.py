"""Display currency state shared by everything that renders money.

Holds the currency the user wants amounts shown in, the rate table loaded
for it, and the user-facing notifications raised while switching, loading
rates, and saving the preference.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import httpx

from finance_tracker.domain.currency import (
    CURRENCY_NAMES,
    CurrencyCode,
    RateTable,
    parse_currency_code,
)
from finance_tracker.domain.records import UserProfile
from finance_tracker.exceptions import FinanceTrackerError, InvalidCurrencyError
from finance_tracker.logging_config import get_logger, log_context
from finance_tracker.repositories.interfaces import ProfileRepository
from finance_tracker.services.currency import (
    CurrencyConversionService,
    convert_amount,
    format_currency,
)

logger = get_logger(__name__)

RATES_UNAVAILABLE_MESSAGE = "Unable to fetch exchange rates. Showing original currencies."
SAVE_FAILED_MESSAGE = "Failed to save currency preference"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notification:
    level: NotificationLevel
    message: str


Notifier = Callable[[Notification], None]


@dataclass(frozen=True, slots=True)
class DisplayAmount:
    """A converted amount ready for display.

    ``original_text`` is set only when the caller asked for it and the
    original currency differs from the display currency.
    """

    amount: float
    text: str
    original_text: str | None = None


def _discard(notification: Notification) -> None:
    pass


class DisplayCurrencyState:
    def __init__(
        self,
        service: CurrencyConversionService,
        profile_repo: ProfileRepository | None = None,
        user_id: str | None = None,
        notifier: Notifier | None = None,
        default_currency: CurrencyCode = CurrencyCode.USD,
    ) -> None:
        self._service = service
        self._profile_repo = profile_repo
        self._user_id = user_id
        self._notify = notifier or _discard
        self._display_currency = default_currency
        self._profile: UserProfile | None = None
        self._exchange_rates: RateTable | None = None
        self._is_loading = False
        self._is_saving = False

    @property
    def display_currency(self) -> CurrencyCode:
        return self._display_currency

    @property
    def exchange_rates(self) -> RateTable | None:
        return self._exchange_rates

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_saving(self) -> bool:
        return self._is_saving

    @property
    def profile(self) -> UserProfile | None:
        return self._profile

    @property
    def is_default(self) -> bool:
        """Whether the display currency is already the saved preference."""
        if self._profile is None:
            return False
        return parse_currency_code(self._profile.preferred_currency or "") == (
            self._display_currency
        )

    def load_profile(self) -> UserProfile | None:
        """Adopt the stored preferred currency, if there is a valid one."""
        if self._profile_repo is None or self._user_id is None:
            return None

        try:
            profile = self._profile_repo.get_profile(self._user_id)
        except (FinanceTrackerError, httpx.HTTPError) as e:
            logger.warning("profile_load_failed", user_id=self._user_id, error=str(e))
            return None

        self._profile = profile
        if profile is None or not profile.preferred_currency:
            return profile

        preferred = parse_currency_code(profile.preferred_currency)
        if preferred is None:
            logger.warning(
                "unsupported_preferred_currency",
                user_id=self._user_id,
                preferred_currency=profile.preferred_currency,
            )
            return profile

        self._display_currency = preferred
        return profile

    def initialize(self) -> None:
        """Load the profile preference, then the rates for it."""
        self.load_profile()
        self.load_exchange_rates()

    def set_display_currency(self, currency: CurrencyCode | str) -> None:
        code = parse_currency_code(currency)
        if code is None:
            raise InvalidCurrencyError(str(currency))

        self._display_currency = code
        self._notify(
            Notification(NotificationLevel.SUCCESS, f"Switched to {CURRENCY_NAMES[code]}")
        )
        self.load_exchange_rates()

    def load_exchange_rates(self) -> RateTable:
        base = self._display_currency
        self._is_loading = True
        try:
            with log_context(display_currency=base.value):
                # Show whatever is cached right away, then ask for the real base
                cached = self._service.peek_cached_rates()
                if cached is not None:
                    self._exchange_rates = cached.rates

                outcome = self._service.fetch_rates_with_status(base)
                self._exchange_rates = outcome.rates
                if outcome.degraded:
                    logger.warning("display_rates_degraded", source=outcome.source.value)
                    self._notify(
                        Notification(NotificationLevel.ERROR, RATES_UNAVAILABLE_MESSAGE)
                    )
                return outcome.rates
        finally:
            self._is_loading = False

    def refresh_rates(self) -> RateTable:
        return self.load_exchange_rates()

    def convert_to_display_currency(
        self, amount: float, original_currency: CurrencyCode | str
    ) -> float:
        if self._exchange_rates is None:
            return amount
        return convert_amount(
            amount, original_currency, self._display_currency, self._exchange_rates
        )

    def format_currency(
        self, amount: float, currency: CurrencyCode | str | None = None
    ) -> str:
        return format_currency(amount, currency or self._display_currency)

    def format_amount(
        self,
        amount: float,
        original_currency: CurrencyCode | str,
        show_original: bool = False,
    ) -> DisplayAmount:
        converted = self.convert_to_display_currency(amount, original_currency)
        original_text = None
        if show_original and original_currency != self._display_currency:
            original_text = format_currency(amount, original_currency)
        return DisplayAmount(
            amount=converted,
            text=format_currency(converted, self._display_currency),
            original_text=original_text,
        )

    def conversion_rate_label(self) -> str | None:
        """Reference rate for the header, e.g. ``1 USD = ₹83.12``.

        Quoted against INR, or against USD while INR is displayed. None until
        rates are loaded.
        """
        if self._exchange_rates is None:
            return None

        source = self._display_currency
        target = CurrencyCode.USD if source == CurrencyCode.INR else CurrencyCode.INR
        rate = convert_amount(1.0, source, target, self._exchange_rates)
        return f"1 {source.value} = {format_currency(rate, target)}"

    def save_as_default(self) -> bool:
        """Persist the display currency as the user's preference."""
        if self._profile_repo is None or self._user_id is None:
            logger.warning("save_preference_without_user")
            self._notify(Notification(NotificationLevel.ERROR, SAVE_FAILED_MESSAGE))
            return False

        currency = self._display_currency
        self._is_saving = True
        try:
            self._profile = self._profile_repo.update_preferred_currency(
                self._user_id, currency.value
            )
        except (FinanceTrackerError, httpx.HTTPError) as e:
            logger.error(
                "save_preference_failed",
                user_id=self._user_id,
                currency=currency.value,
                error=str(e),
            )
            self._notify(Notification(NotificationLevel.ERROR, SAVE_FAILED_MESSAGE))
            return False
        finally:
            self._is_saving = False

        self._notify(
            Notification(
                NotificationLevel.SUCCESS,
                f"{CURRENCY_NAMES[currency]} saved as default currency",
            )
        )
        return True
