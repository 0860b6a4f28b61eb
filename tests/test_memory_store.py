"""Tests for the in-memory key-value store."""

import pytest

from otp_auth.config import Settings
from otp_auth.errors import StoreError
from otp_auth.kvstore.factory import create_store
from otp_auth.kvstore.memory_store import InMemoryStore
from otp_auth.kvstore.redis_store import RedisStore


@pytest.mark.asyncio
async def test_get_missing_key_returns_none(kv):
    assert await kv.get("nope") is None
    assert await kv.exists("nope") is False


@pytest.mark.asyncio
async def test_entry_expires_exactly_at_ttl(kv, clock):
    await kv.set("k", "v", ttl_seconds=10)
    clock.advance(9)
    assert await kv.get("k") == "v"
    clock.advance(1)
    assert await kv.get("k") is None
    assert await kv.exists("k") is False


@pytest.mark.asyncio
async def test_set_without_ttl_never_expires(kv, clock):
    await kv.set("k", "v")
    clock.advance(10**9)
    assert await kv.get("k") == "v"


@pytest.mark.asyncio
async def test_incr_creates_then_increments_keeping_ttl(kv, clock):
    assert await kv.incr("fresh") == 1

    await kv.set("counter", "1", ttl_seconds=60)
    assert await kv.incr("counter") == 2
    assert await kv.incr("counter") == 3
    clock.advance(60)
    assert await kv.get("counter") is None


@pytest.mark.asyncio
async def test_incr_on_non_integer_raises_store_error(kv):
    await kv.set("k", "abc")
    with pytest.raises(StoreError):
        await kv.incr("k")


@pytest.mark.asyncio
async def test_expire_applies_to_existing_key_only(kv, clock):
    await kv.set("k", "v")
    await kv.expire("k", 5)
    await kv.expire("absent", 5)
    clock.advance(5)
    assert await kv.get("k") is None
    assert await kv.exists("absent") is False


@pytest.mark.asyncio
async def test_delete_is_idempotent(kv):
    await kv.set("k", "v")
    await kv.delete("k")
    await kv.delete("k")
    assert await kv.get("k") is None


@pytest.mark.asyncio
async def test_compare_and_delete(kv, clock):
    await kv.set("k", "123456", ttl_seconds=30)

    assert await kv.compare_and_delete("k", "000000") is False
    assert await kv.get("k") == "123456"

    assert await kv.compare_and_delete("k", "123456") is True
    assert await kv.compare_and_delete("k", "123456") is False

    await kv.set("k", "123456", ttl_seconds=30)
    clock.advance(30)
    assert await kv.compare_and_delete("k", "123456") is False


@pytest.mark.asyncio
async def test_unread_expired_entries_are_swept_on_write(clock):
    store = InMemoryStore(clock=clock, sweep_every=100)
    for i in range(1000):
        await store.set(f"rate_limit:otp:ip:10.0.{i // 256}.{i % 256}", "1", ttl_seconds=60)
    assert len(store) == 1000

    clock.advance(3600)
    for i in range(100):
        await store.set(f"fresh:{i}", "1", ttl_seconds=60)

    assert len(store) == 100


@pytest.mark.asyncio
async def test_sweep_keeps_live_and_permanent_entries(clock):
    store = InMemoryStore(clock=clock, sweep_every=1)
    await store.set("short", "1", ttl_seconds=10)
    await store.set("long", "1", ttl_seconds=1000)
    await store.set("forever", "1")

    clock.advance(10)
    await store.incr("counter")

    assert len(store) == 3
    assert await store.get("long") == "1"
    assert await store.get("forever") == "1"


# ── Backend selection ────────────────────────────────────

def test_factory_builds_configured_backend():
    assert isinstance(create_store(Settings(kv_backend="memory")), InMemoryStore)
    assert isinstance(
        create_store(Settings(kv_backend="redis", redis_url="redis://localhost:6379/0")),
        RedisStore,
    )
