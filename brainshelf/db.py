"""
Database connection pool and connection managers.

All database access goes through system_conn() or listen_conn().
Never use pool.acquire() directly outside this module.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from uuid import UUID

import asyncpg

from brainshelf.config import settings

logger = logging.getLogger(__name__)

pool: asyncpg.Pool | None = None


async def init_pool() -> None:
    """
    Initialize the connection pool.
    Called once at application startup.
    """
    global pool
    if not settings.DATABASE_URL:
        raise RuntimeError("DATABASE_URL environment variable is required")
    pool = await asyncpg.create_pool(
        dsn=settings.DATABASE_URL,
        min_size=settings.DATABASE_POOL_MIN_SIZE,
        max_size=settings.DATABASE_POOL_MAX_SIZE,
        command_timeout=60,
        init=_init_connection,
    )
    logger.info("db: pool initialized")


async def close_pool() -> None:
    """
    Close the connection pool.
    Called at application shutdown.
    """
    global pool
    if pool is not None:
        await pool.close()
        pool = None
        logger.info("db: pool closed")


async def _init_connection(conn: asyncpg.Connection) -> None:
    """
    Initialize each new connection.
    Entry and identity ids are handed around as plain strings.
    """
    await conn.set_type_codec(
        "uuid",
        encoder=str,
        decoder=lambda x: str(UUID(x)),
        schema="pg_catalog",
    )


@asynccontextmanager
async def system_conn():
    """
    Acquire a transactional database connection.

    Usage:
        async with system_conn() as conn:
            rows = await conn.fetch("SELECT * FROM entries ORDER BY created_at DESC")

    Yields:
        asyncpg.Connection inside a transaction
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn:
        async with conn.transaction():
            yield conn


@asynccontextmanager
async def listen_conn(channel: str, callback):
    """
    Hold a connection that listens on a NOTIFY channel.

    The connection is taken out of the pool for as long as the context is
    open, since a LISTEN only lives on the connection that issued it.

    Args:
        channel: Postgres notification channel
        callback: asyncpg listener, called as callback(conn, pid, channel, payload)

    Yields:
        asyncpg.Connection with the listener registered
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn:
        await conn.add_listener(channel, callback)
        try:
            yield conn
        finally:
            await conn.remove_listener(channel, callback)
