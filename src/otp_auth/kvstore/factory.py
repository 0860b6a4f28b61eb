"""Builds the configured key-value store backend."""

import logging

from otp_auth.config import Settings
from otp_auth.kvstore.base import KeyValueStore
from otp_auth.kvstore.memory_store import InMemoryStore
from otp_auth.kvstore.redis_store import RedisStore

logger = logging.getLogger(__name__)


def create_store(settings: Settings) -> KeyValueStore:
    """Return a store for ``settings.kv_backend``.

    The Redis client connects lazily, so this never blocks on the network.
    """
    if settings.kv_backend == "memory":
        logger.warning("Using in-memory key-value store; state is per-process")
        return InMemoryStore()
    logger.info("Using Redis key-value store")
    return RedisStore.from_url(settings.redis_url)
