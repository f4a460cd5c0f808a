from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 10 * 60

T = TypeVar("T")


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    key: str
    payload: T
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    total_entries: int
    valid_entries: int
    expired_entries: int
    oldest_entry: str | None  # ISO timestamp of the oldest valid entry


class InMemoryCacheStore(Generic[T]):
    """Thread-safe TTL cache held in process memory.

    The lock is held for single map operations only; ``sweep`` snapshots the
    keys and deletes expired entries one at a time.
    """

    def __init__(self, default_ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.time) -> None:
        self._default_ttl = default_ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> T | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(now):
                del self._entries[key]
                return None
            return entry.payload

    def set(self, key: str, payload: T, ttl_seconds: float | None = None) -> None:
        now = self._clock()
        ttl = self._default_ttl if ttl_seconds is None else ttl_seconds
        entry = CacheEntry(key=key, payload=payload, created_at=now, expires_at=now + ttl)
        with self._lock:
            self._entries[key] = entry

    def invalidate(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def clear(self) -> None:
        self.invalidate()

    def sweep(self) -> int:
        """Remove every expired entry and return how many were removed."""
        now = self._clock()
        with self._lock:
            candidates = [key for key, entry in self._entries.items() if entry.is_expired(now)]

        removed = 0
        for key in candidates:
            with self._lock:
                entry = self._entries.get(key)
                # Re-check: the key may have been refreshed since the snapshot.
                if entry is not None and entry.is_expired(now):
                    del self._entries[key]
                    removed += 1
        if removed:
            logger.debug("Swept %d expired cache entries", removed)
        return removed

    def stats(self) -> CacheStats:
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())
        valid = [e for e in entries if not e.is_expired(now)]
        oldest = min((e.created_at for e in valid), default=None)
        return CacheStats(
            total_entries=len(entries),
            valid_entries=len(valid),
            expired_entries=len(entries) - len(valid),
            oldest_entry=datetime.fromtimestamp(oldest, tz=UTC).isoformat() if oldest is not None else None,
        )
