"""Without DATABASE_URL the service runs entirely on in-memory stores."""

from __future__ import annotations

import asyncio

import pytest

from cert_engine.db import engine as db_engine


def test_no_engine_without_database_url() -> None:
    assert db_engine.engine is None
    assert db_engine.async_session_factory is None


def test_session_dependency_refuses_without_database_url() -> None:
    async def _first_session() -> None:
        await anext(db_engine.get_async_session())

    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        asyncio.run(_first_session())


def test_lifespan_is_a_no_op_without_engine() -> None:
    async def _run() -> None:
        async with db_engine.lifespan_db():
            pass

    asyncio.run(_run())
