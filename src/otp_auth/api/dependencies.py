"""FastAPI dependencies: shared service instances and bearer authentication."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from otp_auth.config import settings
from otp_auth.database.engine import get_session
from otp_auth.database.repository import UserRepository
from otp_auth.errors import TokenInvalidError
from otp_auth.kvstore.base import KeyValueStore
from otp_auth.kvstore.factory import create_store
from otp_auth.services.auth_service import AuthService
from otp_auth.services.otp_store import OTPChallengeStore
from otp_auth.services.rate_limiter import RateLimiter
from otp_auth.services.session_issuer import SessionClaims, SessionIssuer

# ── Shared instances (created once, reused across requests) ──
kv_store: KeyValueStore = create_store(settings)
_challenges = OTPChallengeStore(kv_store)
_limiter = RateLimiter(
    kv_store,
    count=settings.otp_rate_limit_count,
    window_seconds=settings.otp_rate_limit_window_seconds,
    address_multiplier=settings.otp_address_limit_multiplier,
)
_sessions = SessionIssuer(
    secret=settings.jwt_secret,
    validity_seconds=settings.jwt_expiration_seconds,
    algorithm=settings.jwt_algorithm,
)


def get_session_issuer() -> SessionIssuer:
    return _sessions


def get_user_repository(
    db_session: Annotated[AsyncSession, Depends(get_session)],
) -> UserRepository:
    return UserRepository(db_session)


def get_auth_service(
    users: Annotated[UserRepository, Depends(get_user_repository)],
    sessions: Annotated[SessionIssuer, Depends(get_session_issuer)],
) -> AuthService:
    return AuthService(
        users=users,
        challenges=_challenges,
        limiter=_limiter,
        sessions=sessions,
        otp_length=settings.otp_length,
        otp_ttl_seconds=settings.otp_expiration_seconds,
    )


def get_current_claims(
    sessions: Annotated[SessionIssuer, Depends(get_session_issuer)],
    authorization: Annotated[str | None, Header()] = None,
) -> SessionClaims:
    """Resolve ``Authorization: Bearer <token>`` into verified claims."""
    if not authorization:
        raise TokenInvalidError("Authorization header is required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token or " " in token:
        raise TokenInvalidError("Authorization header must be 'Bearer <token>'")
    return sessions.verify(token)


CurrentClaims = Annotated[SessionClaims, Depends(get_current_claims)]
