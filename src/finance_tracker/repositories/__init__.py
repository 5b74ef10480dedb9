from finance_tracker.repositories.interfaces import (
    HoldingsRepository,
    ProfileRepository,
    RateCacheStore,
)
from finance_tracker.repositories.memory import (
    InMemoryHoldingsRepository,
    InMemoryProfileRepository,
    InMemoryRateCacheStore,
)
from finance_tracker.repositories.sqlite import (
    RATE_CACHE_KEY,
    SQLiteDatabase,
    SQLiteKeyValueStore,
    SQLiteRateCacheStore,
)

__all__ = [
    "RATE_CACHE_KEY",
    "HoldingsRepository",
    "InMemoryHoldingsRepository",
    "InMemoryProfileRepository",
    "InMemoryRateCacheStore",
    "ProfileRepository",
    "RateCacheStore",
    "SQLiteDatabase",
    "SQLiteKeyValueStore",
    "SQLiteRateCacheStore",
]
