"""Cache abstractions for remote lookups and the curated dataset."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from ckd_food_panel.domain.dataset import DatasetRecord


class Cache(Protocol):
    """Cache interface for simple key-value data."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present and not expired."""

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL in seconds."""


@dataclass
class _CacheEntry:
    value: object
    expires_at: datetime


@dataclass
class InMemoryCache(Cache):
    """Process-local TTL cache."""

    _entries: dict[str, _CacheEntry]

    def __init__(self) -> None:
        self._entries = {}

    def get(self, key: str) -> object | None:
        """Return a cached value if it hasn't expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: object, ttl_seconds: int) -> None:
        """Store a cached value with a TTL."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)


class DatasetCache:
    """Lazily populated, process-lifetime holder for the curated dataset.

    The first successful ``get`` stores the loaded records and every later
    call returns them without calling the loader again. Concurrent first
    calls may each run the loader; the last one to finish overwrites the
    stored records with identical content. A loader failure is not cached,
    so the next call tries again.
    """

    def __init__(self) -> None:
        self._records: tuple[DatasetRecord, ...] | None = None

    @property
    def populated(self) -> bool:
        """Return True once the dataset has been loaded."""
        return self._records is not None

    async def get(
        self, loader: Callable[[], Awaitable[list[DatasetRecord]]]
    ) -> tuple[DatasetRecord, ...]:
        """Return the cached records, loading them on first use."""
        if self._records is not None:
            return self._records
        records = tuple(await loader())
        self._records = records
        return records
