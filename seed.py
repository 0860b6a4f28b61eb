"""Seed script: populates the identity directory with sample users for testing."""

import asyncio

from otp_auth.database.engine import async_session_factory, init_db
from otp_auth.database.repository import UserRepository

SAMPLE_PHONES = [
    "09121111111",
    "09122222222",
    "+989353333333",
    "989194444444",
]


async def seed() -> None:
    """Insert sample users that don't exist yet."""
    await init_db()
    created = 0
    async with async_session_factory() as session:
        repo = UserRepository(session)
        for phone in SAMPLE_PHONES:
            if await repo.find_by_phone(phone) is None:
                await repo.create(phone)
                created += 1
        await session.commit()
    print(f"✅ Seeded {created} users into the database.")


if __name__ == "__main__":
    asyncio.run(seed())
