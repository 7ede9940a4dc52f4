"""Per-session mutual exclusion with a bounded registry."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class SessionLockRegistry:
    """Hands out one lock per session key.

    At most ``max_locks`` idle locks are retained; the least recently used idle
    ones are dropped first. A lock that is held or awaited is never dropped, so
    callers of the same key always share one lock.
    """

    def __init__(self, max_locks: int = 10_000) -> None:
        if max_locks <= 0:
            raise ValueError("max_locks must be positive.")
        self.max_locks = max_locks
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Block until ``key`` is free and keep it until the block exits."""
        entry = self._checkout(key)
        try:
            with entry.lock:
                yield
        finally:
            self._release(key, entry)

    def _checkout(self, key: str) -> _Entry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry()
                self._entries[key] = entry
            self._entries.move_to_end(key)
            entry.users += 1
            return entry

    def _release(self, key: str, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            self._evict_idle()

    def _evict_idle(self) -> None:
        excess = len(self._entries) - self.max_locks
        if excess <= 0:
            return
        for key in [key for key, entry in self._entries.items() if entry.users == 0][:excess]:
            del self._entries[key]
        logger.debug("session_locks_evicted", extra={"remaining": len(self._entries)})
