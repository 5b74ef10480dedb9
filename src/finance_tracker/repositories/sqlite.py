import json
import sqlite3
from datetime import UTC, datetime
from pathlib import Path

from finance_tracker.domain.currency import CachedRateTable
from finance_tracker.exceptions import RateCacheCorruptedError, RateCacheWriteError
from finance_tracker.repositories.interfaces import RateCacheStore

RATE_CACHE_KEY = "exchange_rates_cache"


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


class SQLiteDatabase:
    """SQLite database connection manager."""

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._path

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            if self._path != ":memory:":
                Path(self._path).parent.mkdir(parents=True, exist_ok=True)
            self._connection = sqlite3.connect(
                self._path, check_same_thread=self._check_same_thread
            )
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def initialize(self) -> None:
        """Create all database tables."""
        conn = self.get_connection()
        conn.executescript(
            """
            -- Namespaced key-value storage
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );
            """
        )
        conn.commit()

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None


class SQLiteKeyValueStore:
    def __init__(self, db: SQLiteDatabase) -> None:
        self._db = db

    def get(self, key: str) -> str | None:
        conn = self._db.get_connection()
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        if row is None:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                           updated_at = excluded.updated_at
            """,
            (key, value, _utc_now_iso()),
        )
        conn.commit()

    def delete(self, key: str) -> None:
        conn = self._db.get_connection()
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()


class SQLiteRateCacheStore(RateCacheStore):
    """Rate cache slot persisted as JSON under a single key.

    The decoded entry is memoized against its raw payload, so repeated loads
    of an unchanged slot hand back the same object.
    """

    def __init__(self, db: SQLiteDatabase, key: str = RATE_CACHE_KEY) -> None:
        self._kv = SQLiteKeyValueStore(db)
        self._key = key
        self._memo: tuple[str, CachedRateTable] | None = None

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> CachedRateTable | None:
        try:
            raw = self._kv.get(self._key)
        except sqlite3.Error as e:
            # e.g. a value that is not valid UTF-8 fails while the row is read
            raise RateCacheCorruptedError(self._key, str(e)) from e
        if raw is None:
            self._memo = None
            return None
        if self._memo is not None and self._memo[0] == raw:
            return self._memo[1]

        try:
            entry = CachedRateTable.from_dict(json.loads(raw))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError subclass
            raise RateCacheCorruptedError(self._key, str(e)) from e

        self._memo = (raw, entry)
        return entry

    def save(self, entry: CachedRateTable) -> None:
        raw = json.dumps(entry.to_dict())
        try:
            self._kv.set(self._key, raw)
        except sqlite3.Error as e:
            raise RateCacheWriteError(self._key, str(e)) from e
        self._memo = (raw, entry)

    def clear(self) -> None:
        self._memo = None
        try:
            self._kv.delete(self._key)
        except sqlite3.Error as e:
            raise RateCacheWriteError(self._key, str(e)) from e
