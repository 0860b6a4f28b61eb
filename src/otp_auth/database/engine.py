"""Identity directory storage: async engine, session factory and schema setup."""

from collections.abc import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from otp_auth.config import settings
from otp_auth.models.user import Base


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the engine for *database_url*.

    An in-memory SQLite database lives only as long as its connection, so
    every session must share a single one or users vanish between requests.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:"):
        return create_async_engine(
            url,
            echo=echo,
            poolclass=StaticPool,
        )
    return create_async_engine(url, echo=echo)


engine = build_engine(settings.database_url, echo=settings.debug)

async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create the users table if it doesn't exist yet."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session: committed on success, rolled back on error.

    Users provisioned during OTP verification become visible only after the
    commit.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
