"""Authentication service: request an OTP for a phone, then exchange it for a session."""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError

from otp_auth.database.repository import UserRepository
from otp_auth.errors import InvalidOrExpiredError, StoreError
from otp_auth.models.user import User
from otp_auth.services.otp_store import OTPChallengeStore
from otp_auth.services.rate_limiter import RateLimiter
from otp_auth.services.session_issuer import SessionClaims, SessionIssuer
from otp_auth.validation import validate_code, validate_phone_number

logger = logging.getLogger(__name__)

# Stand-in for an SMS gateway: codes are written here and nowhere else.
delivery_logger = logging.getLogger("otp_auth.delivery")


@dataclass(frozen=True)
class ChallengeAccepted:
    """Returned by :meth:`AuthService.request_challenge`; never carries the code."""

    expires_in_seconds: int


@dataclass(frozen=True)
class AuthResult:
    token: str
    user: User
    created: bool = False


def generate_code(length: int) -> str:
    """Uniformly random *length*-digit code with a non-zero leading digit."""
    lowest = 10 ** (length - 1)
    return str(lowest + secrets.randbelow(9 * lowest))


class AuthService:
    """Composes rate limiting, OTP challenges and session tokens.

    Flow
    ----
    1. ``request_challenge``: validate the phone, pass the address and phone
       rate limits, store a fresh code (replacing any earlier one), count
       the request against the phone, and deliver the code out of band.
    2. ``verify_challenge``: validate input, compare against the stored
       code, consume it, find or create the user, and mint a session.

    Wrong, missing and expired codes all raise the same
    :class:`InvalidOrExpiredError`.  A wrong guess leaves the real challenge
    in place for a retry within its TTL.
    """

    def __init__(
        self,
        users: UserRepository,
        challenges: OTPChallengeStore,
        limiter: RateLimiter,
        sessions: SessionIssuer,
        otp_length: int = 6,
        otp_ttl_seconds: int = 120,
    ) -> None:
        self._users = users
        self._challenges = challenges
        self._limiter = limiter
        self._sessions = sessions
        self._otp_length = otp_length
        self._otp_ttl = otp_ttl_seconds

    async def request_challenge(
        self, phone_number: str, source_address: str
    ) -> ChallengeAccepted:
        """Issue a new OTP for *phone_number*.

        Raises ``ValidationError``, ``RateLimitedError`` or ``StoreError``.
        """
        validate_phone_number(phone_number)
        await self._limiter.guard_challenge_request(source_address, phone_number)

        code = generate_code(self._otp_length)
        await self._challenges.issue(phone_number, code, self._otp_ttl)
        await self._limiter.record_challenge_issued(phone_number)

        self._deliver(phone_number, code)
        return ChallengeAccepted(expires_in_seconds=self._otp_ttl)

    async def verify_challenge(self, phone_number: str, code: str) -> AuthResult:
        """Exchange a correct OTP for a session token and the user record.

        Raises ``ValidationError``, ``InvalidOrExpiredError`` or ``StoreError``.
        """
        validate_phone_number(phone_number)
        validate_code(code, self._otp_length)

        stored = await self._challenges.fetch(phone_number)
        if stored is None or stored != code:
            logger.info("OTP verification failed for %s", phone_number)
            raise InvalidOrExpiredError()

        # Only one of several concurrent correct submissions gets through.
        if not await self._challenges.consume_matching(phone_number, code):
            logger.info("OTP for %s was consumed concurrently", phone_number)
            raise InvalidOrExpiredError()

        user, created = await self._resolve_user(phone_number)
        token = self._sessions.mint(user.id, user.phone_number)
        logger.info("User %s authenticated via OTP (new=%s)", user.id, created)
        return AuthResult(token=token, user=user, created=created)

    def validate_session(self, token: str) -> SessionClaims:
        """Raises ``TokenInvalidError`` or ``TokenExpiredError``."""
        return self._sessions.verify(token)

    # ── Private helpers ──────────────────────────────────

    async def _resolve_user(self, phone_number: str) -> tuple[User, bool]:
        """Find the user for *phone_number*, provisioning one on first login."""
        try:
            user = await self._users.find_by_phone(phone_number)
            if user is not None:
                return user, False
            user = await self._users.create(phone_number)
        except SQLAlchemyError as exc:
            logger.exception("Identity directory error for %s", phone_number)
            raise StoreError("Error resolving user") from exc
        logger.info("Provisioned user %s for %s", user.id, phone_number)
        return user, True

    @staticmethod
    def _deliver(phone_number: str, code: str) -> None:
        delivery_logger.info("[OTP] Phone: %s, Code: %s", phone_number, code)
