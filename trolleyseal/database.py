"""Async engine, sessions and connectivity check for the remote store."""

from __future__ import annotations

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from trolleyseal.config.settings import settings
from trolleyseal.models import Base

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def resolve_schema(raw: Optional[str]) -> Optional[str]:
    """Return the configured schema, or None for blank or unsafe names."""

    schema = (raw or "").strip()
    if not schema:
        return None
    if not _IDENTIFIER.fullmatch(schema):
        logger.warning("Ignoring invalid DB_SCHEMA_NAME %r; using the default schema", raw)
        return None
    return schema


SCHEMA = resolve_schema(settings.database.schema_name)


def _create_engine() -> AsyncEngine:
    options: dict[str, Any] = {
        "echo": settings.debug,
        "pool_pre_ping": True,
        # asyncpg's connect timeout keeps a dead store from hanging requests
        "connect_args": {"timeout": settings.remote_timeout_seconds},
    }
    if settings.database.serverless:
        options["poolclass"] = NullPool
    if SCHEMA:
        options["execution_options"] = {"schema_translate_map": {None: SCHEMA}}
    return create_async_engine(settings.database.url, **options)


engine: AsyncEngine = _create_engine()

SessionFactory = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    async with SessionFactory() as session:
        yield session


async def get_session() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding one session per request."""

    async with session_scope() as session:
        yield session


async def ping() -> bool:
    """Return True when a trivial query round-trips within the remote timeout."""

    async def select_one() -> None:
        async with session_scope() as session:
            await session.execute(text("SELECT 1"))

    try:
        await asyncio.wait_for(select_one(), settings.remote_timeout_seconds)
    except (asyncio.TimeoutError, OSError, SQLAlchemyError) as exc:
        logger.warning("Store connectivity check failed: %r", exc)
        return False
    return True


async def init_models() -> None:
    """Create the schema (when configured) and any missing tables."""

    async with engine.begin() as conn:
        if SCHEMA:
            await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{SCHEMA}"'))
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ensured in schema %s", SCHEMA or "public")


async def dispose_engine() -> None:
    await engine.dispose()


__all__ = [
    "SCHEMA",
    "SessionFactory",
    "dispose_engine",
    "engine",
    "get_session",
    "init_models",
    "ping",
    "resolve_schema",
    "session_scope",
]
