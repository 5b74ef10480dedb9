"""Tests for DisplayCurrencyState."""

import pytest

from finance_tracker.domain.currency import CurrencyCode
from finance_tracker.domain.records import UserProfile
from finance_tracker.exceptions import BackendAPIError, InvalidCurrencyError
from finance_tracker.repositories.memory import InMemoryProfileRepository
from finance_tracker.services.currency import CurrencyConversionService
from finance_tracker.services.display_currency import (
    RATES_UNAVAILABLE_MESSAGE,
    DisplayCurrencyState,
    Notification,
    NotificationLevel,
)


class BrokenProfileRepository(InMemoryProfileRepository):
    def get_profile(self, user_id: str) -> UserProfile | None:
        raise BackendAPIError(500, "database unavailable")

    def update_preferred_currency(self, user_id: str, currency: str) -> UserProfile:
        raise BackendAPIError(403, "permission denied")


@pytest.fixture
def notifications() -> list[Notification]:
    return []


@pytest.fixture
def profiles() -> InMemoryProfileRepository:
    return InMemoryProfileRepository([UserProfile(id="user-1", preferred_currency="EUR")])


@pytest.fixture
def state(
    currency_service: CurrencyConversionService,
    profiles: InMemoryProfileRepository,
    notifications: list[Notification],
) -> DisplayCurrencyState:
    return DisplayCurrencyState(
        currency_service,
        profile_repo=profiles,
        user_id="user-1",
        notifier=notifications.append,
    )


class TestInitialDisplayCurrency:
    def test_defaults_to_usd(self, currency_service):
        state = DisplayCurrencyState(currency_service)

        assert state.display_currency == CurrencyCode.USD
        assert state.exchange_rates is None
        assert state.load_profile() is None

    def test_profile_preference_is_adopted(self, state: DisplayCurrencyState):
        state.load_profile()

        assert state.display_currency == CurrencyCode.EUR
        assert state.is_default

    def test_unsupported_preference_is_ignored(self, currency_service, log_output):
        profiles = InMemoryProfileRepository([UserProfile(id="u", preferred_currency="CHF")])
        state = DisplayCurrencyState(currency_service, profile_repo=profiles, user_id="u")

        state.load_profile()

        assert state.display_currency == CurrencyCode.USD
        assert "unsupported_preferred_currency" in log_output()

    def test_profile_without_preference_keeps_default(self, currency_service):
        profiles = InMemoryProfileRepository([UserProfile(id="u")])
        state = DisplayCurrencyState(
            currency_service,
            profile_repo=profiles,
            user_id="u",
            default_currency=CurrencyCode.GBP,
        )

        state.load_profile()

        assert state.display_currency == CurrencyCode.GBP
        assert not state.is_default

    def test_profile_backend_error_keeps_default(self, currency_service, log_output):
        state = DisplayCurrencyState(
            currency_service, profile_repo=BrokenProfileRepository(), user_id="u"
        )

        assert state.load_profile() is None
        assert state.display_currency == CurrencyCode.USD
        assert "profile_load_failed" in log_output()

    def test_initialize_loads_rates_for_preference(
        self, state: DisplayCurrencyState, rate_server
    ):
        rate_server.rates_by_base["EUR"] = {"USD": 1.087}

        state.initialize()

        assert rate_server.requests[0].url.params["from"] == "EUR"
        assert state.exchange_rates is not None
        assert state.exchange_rates[CurrencyCode.EUR] == 1.0
        assert not state.is_loading


class TestSwitchingCurrency:
    def test_switch_notifies_and_loads_rates(
        self, state: DisplayCurrencyState, notifications, rate_server
    ):
        state.set_display_currency("usd")

        assert state.display_currency == CurrencyCode.USD
        assert notifications[0] == Notification(
            NotificationLevel.SUCCESS, "Switched to US Dollar"
        )
        assert state.exchange_rates is not None
        assert state.exchange_rates[CurrencyCode.INR] == 83.12
        assert rate_server.call_count == 1

    def test_switch_does_not_persist_preference(
        self, state: DisplayCurrencyState, profiles: InMemoryProfileRepository
    ):
        state.load_profile()
        state.set_display_currency(CurrencyCode.USD)

        profile = profiles.get_profile("user-1")
        assert profile is not None
        assert profile.preferred_currency == "EUR"
        assert not state.is_default

    def test_unsupported_currency_raises(self, state: DisplayCurrencyState):
        with pytest.raises(InvalidCurrencyError):
            state.set_display_currency("XYZ")
        assert state.display_currency == CurrencyCode.USD


class TestLoadingRates:
    def test_degraded_load_notifies_once(
        self, state: DisplayCurrencyState, notifications, rate_server
    ):
        rate_server.status_code = 500

        rates = state.refresh_rates()

        assert rates == {code: 1.0 for code in CurrencyCode}
        errors = [n for n in notifications if n.level == NotificationLevel.ERROR]
        assert errors == [Notification(NotificationLevel.ERROR, RATES_UNAVAILABLE_MESSAGE)]

    def test_successful_load_does_not_notify(
        self, state: DisplayCurrencyState, notifications
    ):
        state.refresh_rates()

        assert notifications == []

    def test_cached_table_is_used_when_refresh_fails(
        self, state: DisplayCurrencyState, rate_server
    ):
        state.refresh_rates()
        usd_rates = state.exchange_rates
        rate_server.status_code = 502

        state.set_display_currency(CurrencyCode.GBP)

        assert state.exchange_rates is usd_rates

    def test_expired_table_survives_an_offline_refresh(
        self, state: DisplayCurrencyState, rate_server, clock, notifications
    ):
        usd_rates = state.refresh_rates()
        clock.advance(60 * 60 * 1000 + 1)
        rate_server.status_code = 503

        rates = state.refresh_rates()

        assert rates is usd_rates
        assert rates[CurrencyCode.INR] == 83.12
        assert notifications[-1].level == NotificationLevel.ERROR


class TestConversionAndFormatting:
    def test_no_rates_returns_amount(self, state: DisplayCurrencyState):
        assert state.convert_to_display_currency(100.0, CurrencyCode.EUR) == 100.0

    def test_converts_into_display_currency(self, state: DisplayCurrencyState):
        state.refresh_rates()

        assert state.convert_to_display_currency(92.0, "EUR") == pytest.approx(100.0)

    def test_format_defaults_to_display_currency(self, state: DisplayCurrencyState):
        assert state.format_currency(1500) == "$1,500.00"
        assert state.format_currency(1500, CurrencyCode.INR) == "₹1,500.00"

    def test_format_amount_with_original(self, state: DisplayCurrencyState):
        state.refresh_rates()

        shown = state.format_amount(-92.0, CurrencyCode.EUR, show_original=True)

        assert shown.amount == pytest.approx(-100.0)
        assert shown.text == "-$100.00"
        assert shown.original_text == "-€92.00"

    def test_format_amount_same_currency_has_no_original(
        self, state: DisplayCurrencyState
    ):
        state.refresh_rates()

        shown = state.format_amount(10.0, CurrencyCode.USD, show_original=True)

        assert shown.text == "$10.00"
        assert shown.original_text is None

    def test_conversion_rate_label_against_rupee(self, state: DisplayCurrencyState):
        assert state.conversion_rate_label() is None

        state.refresh_rates()

        assert state.conversion_rate_label() == "1 USD = ₹83.12"

    def test_conversion_rate_label_while_showing_rupees(
        self, state: DisplayCurrencyState, rate_server
    ):
        rate_server.rates_by_base["INR"] = {"USD": 0.012}

        state.set_display_currency(CurrencyCode.INR)

        assert state.conversion_rate_label() == "1 INR = $0.01"


class TestSaveAsDefault:
    def test_saves_display_currency(
        self,
        state: DisplayCurrencyState,
        profiles: InMemoryProfileRepository,
        notifications,
    ):
        state.load_profile()
        state.set_display_currency(CurrencyCode.JPY)

        assert state.save_as_default()

        assert profiles.get_profile("user-1") == UserProfile(
            id="user-1", preferred_currency="JPY"
        )
        assert state.is_default
        assert not state.is_saving
        assert notifications[-1] == Notification(
            NotificationLevel.SUCCESS, "Japanese Yen saved as default currency"
        )

    def test_backend_failure_notifies(self, currency_service, notifications, log_output):
        state = DisplayCurrencyState(
            currency_service,
            profile_repo=BrokenProfileRepository(),
            user_id="u",
            notifier=notifications.append,
        )

        assert not state.save_as_default()
        assert notifications == [
            Notification(NotificationLevel.ERROR, "Failed to save currency preference")
        ]
        assert "save_preference_failed" in log_output()

    def test_without_user_fails_quietly(self, currency_service, notifications):
        state = DisplayCurrencyState(currency_service, notifier=notifications.append)

        assert not state.save_as_default()
        assert notifications[0].level == NotificationLevel.ERROR
