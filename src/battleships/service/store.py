"""Keyed snapshot stores."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Where session snapshots live between calls."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, blob: str, ttl_seconds: float) -> None:
        ...


@dataclass
class _StoredSnapshot:
    blob: str
    ttl_seconds: float
    expires_at: float


class InMemorySessionStore:
    """Thread-safe in-process store with sliding expiry.

    Every successful ``get`` pushes the expiry of the entry forward by its ttl.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: dict[str, _StoredSnapshot] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str) -> str | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at <= now:
                del self._entries[key]
                logger.info("session_expired", extra={"session_key": key})
                return None
            entry.expires_at = now + entry.ttl_seconds
            return entry.blob

    def set(self, key: str, blob: str, ttl_seconds: float) -> None:
        with self._lock:
            self._entries[key] = _StoredSnapshot(blob, ttl_seconds, self._clock() + ttl_seconds)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def purge(self) -> int:
        """Drop expired entries and return how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)
