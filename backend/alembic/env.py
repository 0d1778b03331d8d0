"""
NoteSync Backend - Alembic Environment
========================================

What:  Runs the schema migrations for profiles, notes and note_shares.
How:   Online mode opens an async engine (asyncpg) and hands a sync
       connection to Alembic; offline mode renders the SQL to stdout.
Who:   `alembic upgrade head` / `alembic downgrade base` from backend/.

Database URL, first match wins:
    1. `alembic -x database_url=postgresql+asyncpg://... upgrade head`
    2. DATABASE_URL (app settings)
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from app.config import settings
from app.database import Base

# Registers the notesync tables on Base.metadata for --autogenerate
from app.models.note import Note, NoteShare  # noqa: F401
from app.models.profile import Profile  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    """URL passed with `-x database_url=...`, else the app's DATABASE_URL."""
    return context.get_x_argument(as_dictionary=True).get("database_url") or settings.database_url


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL without a database connection."""
    _configure(
        url=database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_on_connection(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """
    Apply pending revisions against a live database.

    NullPool: the engine lives for one command, so no connection is kept.
    """
    engine = create_async_engine(database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_on_connection)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
