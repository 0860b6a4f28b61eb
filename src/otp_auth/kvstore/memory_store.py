"""In-process key-value store with expiry: single-process deployments and tests."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from otp_auth.errors import StoreError
from otp_auth.kvstore.base import KeyValueStore

logger = logging.getLogger(__name__)


class InMemoryStore(KeyValueStore):
    """Dict-backed store honouring per-key TTLs.

    Each entry maps ``key → (value, expires_at)`` where ``expires_at`` is a
    timestamp from *clock* or ``None`` for no expiry.  Expired entries are
    purged on access, and every *sweep_every* writes a full sweep drops the
    ones nobody reads again.  A lock makes every method atomic even when the
    store is shared between threads.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sweep_every: int = 256,
    ) -> None:
        self._clock = clock
        self._data: dict[str, tuple[str, float | None]] = {}
        self._lock = threading.Lock()
        self._sweep_every = max(1, sweep_every)
        self._writes = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def _note_write(self) -> None:
        self._writes += 1
        if self._writes < self._sweep_every:
            return
        self._writes = 0
        now = self._clock()
        expired = [
            key
            for key, (_, expires_at) in self._data.items()
            if expires_at is not None and now >= expires_at
        ]
        for key in expired:
            del self._data[key]
        if expired:
            logger.debug("Swept %d expired entries", len(expired))

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return entry

    def _deadline(self, ttl_seconds: int | None) -> float | None:
        if ttl_seconds is None:
            return None
        return self._clock() + ttl_seconds

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        with self._lock:
            self._data[key] = (value, self._deadline(ttl_seconds))
            self._note_write()

    async def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    async def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    async def incr(self, key: str) -> int:
        with self._lock:
            entry = self._live(key)
            if entry is None:
                self._data[key] = ("1", None)
                self._note_write()
                return 1
            value, expires_at = entry
            try:
                count = int(value) + 1
            except ValueError as exc:
                raise StoreError(f"value at {key!r} is not an integer") from exc
            self._data[key] = (str(count), expires_at)
            return count

    async def exists(self, key: str) -> bool:
        with self._lock:
            return self._live(key) is not None

    async def expire(self, key: str, ttl_seconds: int) -> None:
        with self._lock:
            entry = self._live(key)
            if entry is not None:
                self._data[key] = (entry[0], self._deadline(ttl_seconds))

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        with self._lock:
            entry = self._live(key)
            if entry is None or entry[0] != expected:
                return False
            del self._data[key]
            return True

    async def close(self) -> None:
        with self._lock:
            self._data.clear()
        logger.debug("In-memory store cleared")
