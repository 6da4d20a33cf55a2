"""
Alembic Migration Environment
===============================

What:  Runs the notes migrations against whatever DATABASE_URL the app uses.
How:   Offline mode renders SQL for review; online mode opens an async engine
       and hands a sync connection to Alembic through run_sync().
Who:   `alembic upgrade head` from the backend directory.

SQLite URLs (local development, tests) run in batch mode, since SQLite can
only alter tables by copying them.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from studynotes.config import settings
from studynotes.database import Base
from studynotes.models.note import Note  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def migration_options(url: str) -> dict:
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "render_as_batch": make_url(url).get_backend_name() == "sqlite",
    }


def run_migrations_offline(url: str) -> None:
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **migration_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection, url: str) -> None:
    context.configure(connection=connection, **migration_options(url))
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate, url)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline(settings.database_url)
else:
    asyncio.run(run_migrations_online(settings.database_url))
