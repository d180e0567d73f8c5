"""Application startup and shutdown.

Builds the Redis-backed session store and the storage backend selected by
``STORAGE_BACKEND``, publishes them on ``planner.state``, and tears them down
again on shutdown.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import redis.asyncio as redis
from fastapi import FastAPI
from redis.asyncio import BlockingConnectionPool as RedisConnectionPool

from planner import state
from planner.config import get_settings
from planner.db import core as db
from planner.sessions import SessionStore
from planner.storage import MemoryStorage, PostgresStorage, Storage

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    redis_client: redis.Redis | None = None
    session_store: SessionStore | None = None
    storage: Storage | None = None
    db_enabled: bool = False


async def init_redis() -> redis.Redis:
    """Initialize Redis connection with connection pool."""
    settings = get_settings()

    redis_pool = RedisConnectionPool(
        host=settings.redis.host,
        port=settings.redis.port,
        password=settings.redis.password if settings.redis.password else None,
        max_connections=settings.redis.max_connections,
        timeout=settings.redis.pool_timeout_sec,
        socket_timeout=settings.redis.socket_timeout,
        socket_connect_timeout=settings.redis.socket_connect_timeout,
    )
    return redis.Redis(connection_pool=redis_pool, decode_responses=True)


def build_storage(backend: str) -> Storage:
    """Instantiate the configured storage backend (without connecting it)."""
    invite = get_settings().invite
    if backend == "memory":
        return MemoryStorage(invite.length, invite.attempts)
    if backend == "postgres":
        return PostgresStorage(invite.length, invite.attempts)
    raise ValueError(f"Unknown storage backend: {backend!r}")


async def setup_resources() -> LifespanResources:
    """Set up all shared resources and publish them on ``state``."""
    settings = get_settings()
    resources = LifespanResources()

    resources.redis_client = await init_redis()
    resources.session_store = SessionStore(resources.redis_client, settings.session.ttl_sec)

    resources.storage = build_storage(settings.storage.backend)
    if resources.storage.name == "postgres":
        await db.init_pool()
        resources.db_enabled = True
    logger.info("Storage backend: %s", resources.storage.name)

    state.redis_client = resources.redis_client
    state.session_store = resources.session_store
    state.storage = resources.storage
    return resources


async def cleanup_resources(resources: LifespanResources) -> None:
    """Clean up all resources on shutdown."""
    if resources.db_enabled:
        try:
            await db.close_pool()
        except Exception:
            logger.exception("Failed to close database pool")

    if resources.redis_client:
        aclose = getattr(resources.redis_client, "aclose", None)
        if callable(aclose):
            await aclose()
        else:
            await resources.redis_client.close()

    state.redis_client = None
    state.session_store = None
    state.storage = None


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    try:
        yield
    finally:
        await cleanup_resources(resources)
