"""OTP challenge store: single-slot, single-use codes kept in the key-value store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from otp_auth.kvstore.base import KeyValueStore

logger = logging.getLogger(__name__)

OTP_KEY_PREFIX = "otp:"


@dataclass(frozen=True)
class OTPChallenge:
    """The challenge most recently issued for a phone number."""

    identity: str
    code: str
    expires_at: datetime


class OTPChallengeStore:
    """Keeps at most one live challenge per phone number.

    Each entry maps ``otp:<phone> → code`` with the challenge TTL as the
    key's expiry.  Expiry is left entirely to the backing store: an expired
    challenge simply reads as absent.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @staticmethod
    def _key(identity: str) -> str:
        return OTP_KEY_PREFIX + identity

    async def issue(self, identity: str, code: str, ttl_seconds: int) -> OTPChallenge:
        """Store *code* for *identity*, replacing any earlier challenge."""
        await self._store.set(self._key(identity), code, ttl_seconds)
        logger.debug("Challenge issued for %s (ttl=%ss)", identity, ttl_seconds)
        return OTPChallenge(
            identity=identity,
            code=code,
            expires_at=datetime.now(UTC) + timedelta(seconds=ttl_seconds),
        )

    async def fetch(self, identity: str) -> str | None:
        """Return the live code for *identity*, or ``None`` if absent or expired."""
        return await self._store.get(self._key(identity))

    async def consume(self, identity: str) -> None:
        """Delete the challenge for *identity*; a no-op when there is none."""
        await self._store.delete(self._key(identity))

    async def consume_matching(self, identity: str, code: str) -> bool:
        """Delete the challenge only if it still holds *code*.

        Of several concurrent callers presenting the same correct code,
        exactly one gets ``True``.
        """
        return await self._store.compare_and_delete(self._key(identity), code)
