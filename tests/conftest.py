"""Shared fixtures: controllable clock, in-memory store and database, wired services."""

from __future__ import annotations

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from otp_auth.database.engine import build_engine, init_db
from otp_auth.database.repository import UserRepository
from otp_auth.kvstore.memory_store import InMemoryStore
from otp_auth.services.auth_service import AuthService
from otp_auth.services.otp_store import OTPChallengeStore
from otp_auth.services.rate_limiter import RateLimiter
from otp_auth.services.session_issuer import SessionIssuer

TEST_SECRET = "test-secret-with-enough-length-for-hs256"
RATE_LIMIT_COUNT = 3
RATE_LIMIT_WINDOW = 600
OTP_TTL = 120


class FakeClock:
    """Manually advanced clock for expiry and window tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv(clock: FakeClock) -> InMemoryStore:
    return InMemoryStore(clock=clock)


@pytest.fixture
def challenges(kv: InMemoryStore) -> OTPChallengeStore:
    return OTPChallengeStore(kv)


@pytest.fixture
def limiter(kv: InMemoryStore) -> RateLimiter:
    return RateLimiter(
        kv, count=RATE_LIMIT_COUNT, window_seconds=RATE_LIMIT_WINDOW, address_multiplier=2
    )


@pytest.fixture
def sessions() -> SessionIssuer:
    return SessionIssuer(secret=TEST_SECRET, validity_seconds=3600)


# ── In-memory test database ─────────────────────────────
@pytest_asyncio.fixture
async def db_session():
    """Fresh in-memory database with all tables; dropped afterwards."""
    engine = build_engine("sqlite+aiosqlite://")
    await init_db(engine)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def users(db_session) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def auth_service(users, challenges, limiter, sessions) -> AuthService:
    return AuthService(
        users=users,
        challenges=challenges,
        limiter=limiter,
        sessions=sessions,
        otp_length=6,
        otp_ttl_seconds=OTP_TTL,
    )
