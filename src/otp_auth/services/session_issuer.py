"""Session issuer: mints and verifies signed, self-contained session tokens."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from otp_auth.errors import TokenExpiredError, TokenInvalidError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionClaims:
    """What a valid token asserts about its holder."""

    user_id: uuid.UUID
    phone_number: str
    issued_at: datetime | None
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _is_timestamp(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SessionIssuer:
    """Signs JWTs carrying ``user_id``, ``phone_number``, ``iat`` and ``exp``.

    No session table is kept: a minted token stays valid until its ``exp``
    regardless of later account changes.  Verification accepts only the
    configured algorithm, so a token re-signed with another algorithm (or
    ``none``) is rejected even if it is otherwise well-formed.
    """

    def __init__(
        self,
        secret: str,
        validity_seconds: int,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret:
            raise ValueError("JWT secret is not configured")
        self._secret = secret
        self._validity = timedelta(seconds=validity_seconds)
        self._algorithm = algorithm
        self._clock = clock

    def mint(self, user_id: uuid.UUID | str, phone_number: str) -> str:
        now = self._clock()
        payload = {
            "user_id": str(user_id),
            "phone_number": phone_number,
            "iat": int(now.timestamp()),
            "exp": int((now + self._validity).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> SessionClaims:
        """Return the claims in *token*.

        Raises
        ------
        TokenExpiredError
            The signature is valid but ``exp`` has passed.
        TokenInvalidError
            Anything else: bad signature, wrong algorithm, missing claims.
        """
        if not token:
            raise TokenInvalidError("Token is missing")
        try:
            # Time claims are checked below against our own clock.
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected session token: %s", exc)
            raise TokenInvalidError() from exc

        expires_at = payload["exp"]
        issued_at = payload.get("iat")
        if not _is_timestamp(expires_at) or (
            issued_at is not None and not _is_timestamp(issued_at)
        ):
            raise TokenInvalidError("Invalid token claims")
        if self._clock().timestamp() >= expires_at:
            raise TokenExpiredError()

        phone_number = payload.get("phone_number")
        if not isinstance(phone_number, str) or not phone_number:
            raise TokenInvalidError("Invalid token claims")
        try:
            user_id = uuid.UUID(str(payload.get("user_id")))
        except ValueError as exc:
            raise TokenInvalidError("Invalid user ID in token") from exc

        return SessionClaims(
            user_id=user_id,
            phone_number=phone_number,
            issued_at=datetime.fromtimestamp(issued_at, tz=UTC) if issued_at is not None else None,
            expires_at=datetime.fromtimestamp(expires_at, tz=UTC),
        )
