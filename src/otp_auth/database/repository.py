"""User repository: the identity directory behind OTP verification."""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from otp_auth.models.user import User

DEFAULT_PAGE_SIZE = 10


class UserRepository:
    """Encapsulates all database queries related to users."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_phone(self, phone_number: str) -> User | None:
        """Look up a user by the exact phone number they verified with."""
        stmt = select(User).where(User.phone_number == phone_number)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_id(self, user_id: uuid.UUID) -> User | None:
        return await self._session.get(User, user_id)

    async def create(self, phone_number: str) -> User:
        """Insert a new user and flush so ``id`` and timestamps are populated."""
        user = User(phone_number=phone_number)
        self._session.add(user)
        await self._session.flush()
        return user

    async def list_users(
        self, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE, search: str = ""
    ) -> tuple[list[User], int]:
        """Return one page of users, newest first, and the total match count.

        *search* is a substring match on the phone number.  Non-positive
        *page* / *page_size* fall back to the defaults.
        """
        if page <= 0:
            page = 1
        if page_size <= 0:
            page_size = DEFAULT_PAGE_SIZE

        stmt = select(User)
        count_stmt = select(func.count()).select_from(User)
        if search:
            condition = User.phone_number.contains(search, autoescape=True)
            stmt = stmt.where(condition)
            count_stmt = count_stmt.where(condition)

        total = (await self._session.execute(count_stmt)).scalar_one()
        stmt = (
            stmt.order_by(User.created_at.desc(), User.id)
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all()), total
