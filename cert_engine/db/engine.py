"""Async SQLAlchemy engine and session factory.

With DATABASE_URL set (postgresql+asyncpg://...) the API uses the Postgres
repositories and a request-scoped session; without it every export here is
None and the in-memory repositories are used instead.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from cert_engine.core.config import SETTINGS

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _build_engine(url: str) -> AsyncEngine:
    # Verification traffic is bursty; stale pooled connections are re-checked
    return create_async_engine(
        url,
        echo=SETTINGS.is_dev,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
    )


engine: AsyncEngine | None = (
    _build_engine(SETTINGS.database_url) if SETTINGS.database_url else None
)
async_session_factory: async_sessionmaker[AsyncSession] | None = (
    async_sessionmaker(engine, expire_on_commit=False) if engine else None
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """One transaction per request.

    A claim's sequence bump and credential insert share this transaction,
    so a rejected claim never consumes a credential number.
    """
    if async_session_factory is None:
        raise RuntimeError("get_async_session called without DATABASE_URL")
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def lifespan_db():
    if engine is None:
        logger.info("Credentials stored in memory; set DATABASE_URL to persist")
        yield
        return

    logger.info(
        "Credential store: %s", engine.url.render_as_string(hide_password=True)
    )
    try:
        yield
    finally:
        await engine.dispose()
        logger.info("Credential store connections closed")
