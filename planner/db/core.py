"""Postgres connection pool for the durable storage backend."""

import logging
from contextlib import asynccontextmanager

from psycopg_pool import AsyncConnectionPool

from planner.config import get_settings
from planner.errors import DatabaseError

logger = logging.getLogger(__name__)

_pool: AsyncConnectionPool | None = None


async def init_pool() -> None:
    """Open the pool and bring the schema up to date."""
    global _pool
    if _pool is not None:
        return
    pg = get_settings().postgres
    _pool = AsyncConnectionPool(
        pg.get_dsn(),
        min_size=pg.pool_min_size,
        max_size=pg.pool_max_size,
        timeout=pg.pool_timeout,
        max_lifetime=pg.pool_max_lifetime,
        max_idle=pg.pool_max_idle,
        check=AsyncConnectionPool.check_connection,
        open=False,
    )
    await _pool.open()
    logger.info("Postgres pool open (min=%d, max=%d)", pg.pool_min_size, pg.pool_max_size)

    from planner.db.schema import ensure_schema  # circular import

    await ensure_schema()


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Postgres pool closed")


@asynccontextmanager
async def _get_connection(autocommit: bool = True):
    if _pool is None:
        raise DatabaseError(detail="Database pool not initialized")
    async with _pool.connection() as conn:
        await conn.set_autocommit(autocommit)
        yield conn
