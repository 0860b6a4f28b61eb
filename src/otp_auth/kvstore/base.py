"""Key-value TTL store: abstract interface every backend must implement."""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract async key-value store with per-key expiry.

    Each individual command is atomic.  Nothing spans commands except
    :meth:`compare_and_delete`, which backends must implement as a single
    atomic step.  Backend failures are raised as
    :class:`otp_auth.errors.StoreError`.
    """

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store *value* under *key*, replacing any previous value and TTL."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the value for *key*, or ``None`` if absent or expired."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*.  Deleting an absent key is not an error."""

    @abstractmethod
    async def incr(self, key: str) -> int:
        """Increment the integer at *key* and return the new value.

        An absent key is created with value ``1`` and no expiry; an existing
        key keeps its TTL.
        """

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and unexpired."""

    @abstractmethod
    async def expire(self, key: str, ttl_seconds: int) -> None:
        """Set a TTL on an existing key."""

    @abstractmethod
    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """Atomically delete *key* if its value equals *expected*.

        Returns ``True`` only for the caller that actually removed it.
        """

    async def ping(self) -> None:
        """Check connectivity.  No-op for in-process backends."""

    async def close(self) -> None:
        """Release backend resources."""
