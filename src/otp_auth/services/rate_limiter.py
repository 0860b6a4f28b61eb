"""Fixed-window rate limiter over the key-value store.

The counter key's TTL is the window: the first write after expiry creates a
fresh counter with a fresh TTL, so windows re-arm on demand rather than
aligning to wall-clock boundaries.  Bursts across a window edge can reach
roughly twice the limit.

Admission is check-then-record with no cross-command atomicity, so
concurrent requests can each see ``count < limit`` and all proceed.  The
limiter is an abuse deterrent, not a hard cap.
"""

from __future__ import annotations

import logging

from otp_auth.errors import RateLimitedError, StoreError
from otp_auth.kvstore.base import KeyValueStore

logger = logging.getLogger(__name__)

RATE_LIMIT_KEY_PREFIX = "rate_limit:"
ADDRESS_SCOPE = "otp:ip:"
PHONE_SCOPE = "otp:phone:"


def address_key(address: str) -> str:
    return f"{RATE_LIMIT_KEY_PREFIX}{ADDRESS_SCOPE}{address}"


def phone_key(phone_number: str) -> str:
    return f"{RATE_LIMIT_KEY_PREFIX}{PHONE_SCOPE}{phone_number}"


class RateLimiter:
    """Counts requests per scope key and answers admit/deny.

    Parameters
    ----------
    store:
        Shared key-value store holding the counters.
    count:
        Requests allowed per phone number per window.
    window_seconds:
        Window length; also the TTL given to a new counter.
    address_multiplier:
        The per-address limit is ``count * address_multiplier``.
    """

    def __init__(
        self,
        store: KeyValueStore,
        count: int,
        window_seconds: int,
        address_multiplier: int = 2,
    ) -> None:
        self._store = store
        self._count = count
        self._window = window_seconds
        self._address_limit = count * address_multiplier

    # ── Generic primitives ───────────────────────────────

    async def admit(self, scope_key: str, limit: int) -> bool:
        """Return ``True`` if *scope_key* is still below *limit*.  Records nothing."""
        raw = await self._store.get(scope_key)
        if raw is None:
            return True
        try:
            count = int(raw)
        except ValueError as exc:
            raise StoreError(f"corrupt rate-limit counter at {scope_key!r}") from exc
        return count < limit

    async def record(self, scope_key: str, window_seconds: int) -> None:
        """Count one request against *scope_key*, starting a window if needed."""
        if not await self._store.exists(scope_key):
            await self._store.set(scope_key, "1", window_seconds)
            return
        # The key may have expired between EXISTS and INCR, in which case
        # INCR recreates it without a TTL.
        if await self._store.incr(scope_key) == 1:
            await self._store.expire(scope_key, window_seconds)

    # ── Challenge-issuance policy ────────────────────────

    async def guard_challenge_request(self, address: str, phone_number: str) -> None:
        """Apply the address scope, then the phone scope.

        An admitted address is recorded immediately, so a request the phone
        scope then denies still counts against its address.  The phone
        scope is recorded later by :meth:`record_challenge_issued`.

        Raises
        ------
        RateLimitedError
            If either scope is at its limit.
        """
        ip_key = address_key(address)
        if not await self.admit(ip_key, self._address_limit):
            logger.info("Address %s exceeded OTP request limit", address)
            raise RateLimitedError("Rate limit exceeded")
        await self.record(ip_key, self._window)

        if not await self.admit(phone_key(phone_number), self._count):
            logger.info("Phone %s exceeded OTP request limit", phone_number)
            raise RateLimitedError("Too many OTP requests for this phone number")

    async def record_challenge_issued(self, phone_number: str) -> None:
        await self.record(phone_key(phone_number), self._window)
