"""Redis-backed key-value store using ``redis.asyncio``."""

from __future__ import annotations

import logging

import redis.asyncio as redis

from otp_auth.errors import StoreError
from otp_auth.kvstore.base import KeyValueStore

logger = logging.getLogger(__name__)

# Deletes KEYS[1] only if it still holds ARGV[1]; runs atomically on the server.
_COMPARE_AND_DELETE = """
if redis.call('GET', KEYS[1]) == ARGV[1] then
    return redis.call('DEL', KEYS[1])
end
return 0
"""


class RedisStore(KeyValueStore):
    """Thin async wrapper translating store calls into Redis commands.

    Every ``redis.RedisError`` (connection refused, timeout, bad reply) is
    re-raised as :class:`StoreError`.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client
        self._compare_and_delete = client.register_script(_COMPARE_AND_DELETE)

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=3,
            socket_timeout=3,
        )
        return cls(client)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        try:
            await self._redis.set(key, value, ex=ttl_seconds)
        except redis.RedisError as exc:
            raise StoreError(f"error setting {key!r}: {exc}") from exc

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(key)
        except redis.RedisError as exc:
            raise StoreError(f"error reading {key!r}: {exc}") from exc

    async def delete(self, key: str) -> None:
        try:
            await self._redis.delete(key)
        except redis.RedisError as exc:
            raise StoreError(f"error deleting {key!r}: {exc}") from exc

    async def incr(self, key: str) -> int:
        try:
            return int(await self._redis.incr(key))
        except redis.RedisError as exc:
            raise StoreError(f"error incrementing {key!r}: {exc}") from exc

    async def exists(self, key: str) -> bool:
        try:
            return await self._redis.exists(key) > 0
        except redis.RedisError as exc:
            raise StoreError(f"error checking {key!r}: {exc}") from exc

    async def expire(self, key: str, ttl_seconds: int) -> None:
        try:
            await self._redis.expire(key, ttl_seconds)
        except redis.RedisError as exc:
            raise StoreError(f"error setting expiry on {key!r}: {exc}") from exc

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        try:
            deleted = await self._compare_and_delete(keys=[key], args=[expected])
        except redis.RedisError as exc:
            raise StoreError(f"error consuming {key!r}: {exc}") from exc
        return int(deleted) == 1

    async def ping(self) -> None:
        try:
            await self._redis.ping()
        except redis.RedisError as exc:
            raise StoreError(f"error connecting to Redis: {exc}") from exc

    async def close(self) -> None:
        await self._redis.aclose()
        logger.info("Redis connection closed")
