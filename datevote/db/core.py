"""Core database connection pool management."""

import logging
from contextlib import asynccontextmanager

import psycopg
from psycopg_pool import AsyncConnectionPool

from datevote.config import get_settings

_logger = logging.getLogger(__name__)

# Global connection pool
_pool: AsyncConnectionPool | None = None


def _get_dsn() -> str:
    """Get DSN from settings."""
    return get_settings().postgres.get_dsn()


async def init_pool() -> None:
    global _pool
    if _pool is not None:
        return
    settings = get_settings().postgres
    dsn = settings.get_dsn()
    _pool = AsyncConnectionPool(
        dsn,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.pool_timeout,
        max_lifetime=settings.pool_max_lifetime,
        max_idle=settings.pool_max_idle,
        reconnect_timeout=settings.pool_reconnect_timeout,
        check=AsyncConnectionPool.check_connection,
        open=False,
    )
    await _pool.open()
    _logger.info(
        "Database connection pool initialized (min=%d, max=%d, timeout=%ss)",
        settings.pool_min_size,
        settings.pool_max_size,
        settings.pool_timeout,
    )
    if get_settings().features.migrations:
        # Import here to avoid circular imports
        from datevote.db.schema import _ensure_schema

        await _ensure_schema()


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        _logger.info("Database connection pool closed")


@asynccontextmanager
async def _get_connection(autocommit: bool = True):
    global _pool
    if _pool is not None:
        async with _pool.connection() as conn:
            await conn.set_autocommit(autocommit)
            yield conn
    else:
        dsn = _get_dsn()
        async with await psycopg.AsyncConnection.connect(dsn, autocommit=autocommit) as conn:
            yield conn


@asynccontextmanager
async def transaction():
    """Yield a connection whose statements commit or roll back together.

    Nested ``conn.transaction()`` blocks inside become savepoints.
    """
    async with _get_connection() as conn:
        async with conn.transaction():
            yield conn


@asynccontextmanager
async def snapshot():
    """Yield a connection inside a read-only REPEATABLE READ transaction.

    Every query run on it sees the same committed state.
    """
    async with _get_connection() as conn:
        async with conn.transaction():
            await conn.execute("SET TRANSACTION ISOLATION LEVEL REPEATABLE READ READ ONLY")
            yield conn


@asynccontextmanager
async def _use_connection(conn: psycopg.AsyncConnection | None):
    """Reuse the caller's connection, or borrow one for a single read."""
    if conn is not None:
        yield conn
    else:
        async with _get_connection() as own:
            yield own


def get_pool_stats() -> dict[str, object]:
    """Get current pool statistics for monitoring."""
    global _pool
    if _pool is None:
        return {"status": "not_initialized"}
    stats = _pool.get_stats()
    return {
        "status": "active",
        "size": stats["pool_size"],
        "available": stats["pool_available"],
        "waiting": stats["requests_waiting"],
        "min_size": stats["pool_min"],
        "max_size": stats["pool_max"],
    }


async def ping() -> bool:
    """Run a trivial query to check the database is reachable."""
    try:
        async with _get_connection() as conn:
            await conn.execute("SELECT 1")
        return True
    except (psycopg.Error, OSError) as e:
        _logger.warning("Database health check failed: %s", e)
        return False


__all__ = [
    "_get_connection",
    "_get_dsn",
    "_use_connection",
    "snapshot",
    "transaction",
    "close_pool",
    "get_pool_stats",
    "init_pool",
    "ping",
]
