from abc import ABC, abstractmethod
from collections.abc import Iterable

from finance_tracker.domain.currency import CachedRateTable
from finance_tracker.domain.records import HoldingKind, MonetaryRow, UserProfile


class RateCacheStore(ABC):
    """Single-slot storage for the most recently fetched rate table."""

    @abstractmethod
    def load(self) -> CachedRateTable | None:
        """Return the stored entry, expired or not.

        Raises:
            RateCacheCorruptedError: If the stored payload cannot be decoded.
        """
        pass

    @abstractmethod
    def save(self, entry: CachedRateTable) -> None:
        """Overwrite the slot with ``entry``.

        Raises:
            RateCacheWriteError: If the slot cannot be written.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Empty the slot.

        Raises:
            RateCacheWriteError: If the slot cannot be written.
        """
        pass


class ProfileRepository(ABC):
    @abstractmethod
    def get_profile(self, user_id: str) -> UserProfile | None:
        pass

    @abstractmethod
    def update_preferred_currency(self, user_id: str, currency: str) -> UserProfile:
        """Persist ``currency`` as the user's default display currency."""
        pass


class HoldingsRepository(ABC):
    """Read access to money-bearing rows scoped by user id."""

    @abstractmethod
    def list_rows(self, kind: HoldingKind, user_id: str) -> Iterable[MonetaryRow]:
        pass
