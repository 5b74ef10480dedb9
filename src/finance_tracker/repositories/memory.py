"""In-process repository implementations.

Used for tests and for running without the hosted backend.
"""

from collections.abc import Iterable

from finance_tracker.domain.currency import CachedRateTable
from finance_tracker.domain.records import HoldingKind, MonetaryRow, UserProfile
from finance_tracker.exceptions import ProfileNotFoundError
from finance_tracker.repositories.interfaces import (
    HoldingsRepository,
    ProfileRepository,
    RateCacheStore,
)


class InMemoryRateCacheStore(RateCacheStore):
    def __init__(self, entry: CachedRateTable | None = None) -> None:
        self._entry = entry

    def load(self) -> CachedRateTable | None:
        return self._entry

    def save(self, entry: CachedRateTable) -> None:
        self._entry = entry

    def clear(self) -> None:
        self._entry = None


class InMemoryProfileRepository(ProfileRepository):
    def __init__(self, profiles: Iterable[UserProfile] = ()) -> None:
        self._profiles = {profile.id: profile for profile in profiles}

    def add(self, profile: UserProfile) -> None:
        self._profiles[profile.id] = profile

    def get_profile(self, user_id: str) -> UserProfile | None:
        return self._profiles.get(user_id)

    def update_preferred_currency(self, user_id: str, currency: str) -> UserProfile:
        if user_id not in self._profiles:
            raise ProfileNotFoundError(user_id)
        updated = UserProfile(id=user_id, preferred_currency=currency)
        self._profiles[user_id] = updated
        return updated


class InMemoryHoldingsRepository(HoldingsRepository):
    def __init__(self) -> None:
        self._rows: dict[tuple[HoldingKind, str], list[MonetaryRow]] = {}

    def add(self, kind: HoldingKind, user_id: str, amount: float, currency: str) -> None:
        self._rows.setdefault((kind, user_id), []).append(
            MonetaryRow(amount=amount, currency=currency)
        )

    def list_rows(self, kind: HoldingKind, user_id: str) -> Iterable[MonetaryRow]:
        return list(self._rows.get((kind, user_id), []))
