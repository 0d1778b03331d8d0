"""
NoteSync Backend - Database Engine & Session Factory
======================================================

What:  Async SQLAlchemy engine construction, session factory and ORM base.
How:   `create_engine_from_url()` builds an async engine with connection pool
       settings taken from config; `create_session_factory()` wraps it.
Who:   Used by SqlStore (one engine per store) and by Alembic (Base.metadata).
When:  The engine is created when the store is built, sessions per store call.

Connection Pooling Strategy (Postgres):
    pool_size=10:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite URLs (tests) skip the pool arguments, which SQLite's pools reject.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class to register with a single metadata
    object, which Alembic reads for migrations.
    """
    pass


def create_engine_from_url(database_url: str) -> AsyncEngine:
    """
    Build the async engine for `database_url`.

    SQL statements are echoed when LOG_LEVEL=DEBUG.
    """
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: rows stay readable after the commit that ends
    each store call.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
