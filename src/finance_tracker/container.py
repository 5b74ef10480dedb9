"""Dependency injection container for Finance Tracker.

Provides lazy, cached construction of the rate cache, the rate provider,
the conversion service, and the backend repositories from Settings.

Usage:
    from finance_tracker.container import get_container

    container = get_container()
    rates = container.currency_service.fetch_rates("USD")
"""

from functools import cached_property, lru_cache
from typing import TYPE_CHECKING

from finance_tracker.config import Settings, get_settings
from finance_tracker.logging_config import get_logger

if TYPE_CHECKING:
    from finance_tracker.repositories.interfaces import (
        HoldingsRepository,
        ProfileRepository,
        RateCacheStore,
    )
    from finance_tracker.repositories.rest import RestQueryClient
    from finance_tracker.repositories.sqlite import SQLiteDatabase
    from finance_tracker.services.currency import CurrencyConversionService
    from finance_tracker.services.display_currency import (
        DisplayCurrencyState,
        Notifier,
    )
    from finance_tracker.services.rate_provider import FrankfurterRateProvider

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    Services are instantiated on first access and cached for reuse. For
    tests, build one with custom settings:

        container = Container(settings=Settings(rate_cache_path=Path(":memory:")))
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        logger.debug(
            "container_created",
            rate_cache_path=str(self._settings.rate_cache_path),
            environment=self._settings.environment.value,
        )

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @cached_property
    def database(self) -> "SQLiteDatabase":
        """SQLite database backing the rate cache, initialized on first access."""
        from finance_tracker.repositories.sqlite import SQLiteDatabase

        db_path = str(self._settings.rate_cache_path)
        logger.info("initializing_cache_database", path=db_path)

        db = SQLiteDatabase(db_path)
        db.initialize()
        return db

    @cached_property
    def rate_cache_store(self) -> "RateCacheStore":
        from finance_tracker.repositories.sqlite import SQLiteRateCacheStore

        return SQLiteRateCacheStore(self.database)

    @cached_property
    def rate_provider(self) -> "FrankfurterRateProvider":
        from finance_tracker.services.rate_provider import FrankfurterRateProvider

        return FrankfurterRateProvider(
            url=self._settings.rate_provider_url,
            timeout=self._settings.http_timeout,
        )

    @cached_property
    def currency_service(self) -> "CurrencyConversionService":
        from finance_tracker.services.currency import CurrencyConversionService

        return CurrencyConversionService(
            provider=self.rate_provider,
            store=self.rate_cache_store,
            ttl_ms=self._settings.rate_cache_ttl_ms,
        )

    @cached_property
    def backend_client(self) -> "RestQueryClient":
        """Client for the hosted backend.

        Raises:
            ValueError: If no backend_url is configured.
        """
        from finance_tracker.repositories.rest import RestQueryClient

        if not self._settings.backend_url:
            raise ValueError("backend_url must be set to reach the hosted backend")

        return RestQueryClient(
            base_url=self._settings.backend_url,
            api_key=self._settings.backend_api_key,
            timeout=self._settings.http_timeout,
        )

    @cached_property
    def profile_repository(self) -> "ProfileRepository":
        from finance_tracker.repositories.rest import RestProfileRepository

        return RestProfileRepository(self.backend_client)

    @cached_property
    def holdings_repository(self) -> "HoldingsRepository":
        from finance_tracker.repositories.rest import RestHoldingsRepository

        return RestHoldingsRepository(self.backend_client)

    def display_currency_state(
        self, user_id: str | None = None, notifier: "Notifier | None" = None
    ) -> "DisplayCurrencyState":
        """Build display state for one user session."""
        from finance_tracker.services.display_currency import DisplayCurrencyState

        profile_repo = (
            self.profile_repository if self._settings.backend_configured else None
        )
        return DisplayCurrencyState(
            service=self.currency_service,
            profile_repo=profile_repo,
            user_id=user_id,
            notifier=notifier,
            default_currency=self._settings.default_currency,
        )

    def close(self) -> None:
        """Close all resources held by the container."""
        if "rate_provider" in self.__dict__:
            self.rate_provider.close()
        if "backend_client" in self.__dict__:
            self.backend_client.close()
        if "database" in self.__dict__:
            logger.info("closing_cache_database")
            self.database.close()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


_container: Container | None = None


@lru_cache
def get_container() -> Container:
    """Get the global container singleton.

    For testing, create a Container directly with custom settings instead.
    """
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Reset the global container, closing its resources."""
    global _container
    if _container is not None:
        _container.close()
        _container = None
    get_container.cache_clear()
