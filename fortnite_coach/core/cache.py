"""Process-wide in-memory cache with per-entry expiry.

One instance is created by the app factory and handed to every component
that caches. Entries are never mutated: a fresh ``set`` replaces the
previous entry. There is no delete operation; expiry is checked lazily on
read and an expired entry is removed at that point.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class TTLCache:
    """Thread-safe key/value store where every entry carries an absolute expiry."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None if missing or expired.

        An expired entry is dropped from the map when a read finds it.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expired = entry.is_expired(self._clock())
            if expired:
                del self._entries[key]
        if expired:
            logger.debug(f"[CACHE] Dropped expired entry for key={key}")
            return None
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)
        with self._lock:
            self._entries[key] = entry
        logger.debug(f"[CACHE] Stored key={key} ttl={ttl_seconds}s")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
