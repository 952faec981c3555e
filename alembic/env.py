"""Alembic environment for the certificate schema.

DATABASE_URL comes from cert_engine.core.config, the same source as the
running service.  Migrations run synchronously, so the asyncpg URL is
rewritten to the psycopg2 driver.
"""

from __future__ import annotations

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context
from cert_engine.core.config import SETTINGS
from cert_engine.db.engine import Base
from cert_engine.db.tables import CertificateRow  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    if SETTINGS.database_url:
        return SETTINGS.database_url.replace("postgresql+asyncpg", "postgresql")
    url = config.get_main_option("sqlalchemy.url")
    if not url:
        raise RuntimeError("Set DATABASE_URL before running migrations")
    return url


def _configure(**kwargs) -> None:
    # JSONB/ARRAY columns on certificates need type comparison to autogenerate
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_migrations_offline() -> None:
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(_database_url(), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
