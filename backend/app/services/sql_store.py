"""
NoteSync Backend - SQLAlchemy Data Store
==========================================

What:  DataStore implementation on async SQLAlchemy (asyncpg on Postgres).
How:   Each call opens its own session and transaction, runs one statement
       (two for delete_note), and commits. SQLAlchemy errors are translated
       into StoreError carrying the driver's message.
Who:   Built by `build_store()` when STORE_BACKEND=sql.
When:  Engine created at app construction; connections taken per call.

Upserts use Session.merge(), which selects by primary key and then inserts
or updates, so the same code runs on Postgres and on SQLite in tests.

Token lookup:
    The migration also installs the SQL function `find_profile_by_token`
    for clients that call the store's RPC surface directly. This store has
    direct table access and runs the equivalent select.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.database import create_engine_from_url, create_session_factory
from app.exceptions import StoreError
from app.models.note import Note, NoteShare
from app.models.profile import Profile
from app.schemas.note import NoteRecord, NoteShareRecord, NoteSummary, SharedNoteItem
from app.schemas.profile import ProfileRecord
from app.services.store_base import DataStore

logger = logging.getLogger(__name__)


def _store_error(operation: str, exc: Exception) -> StoreError:
    """Wrap a SQLAlchemy failure, keeping the driver's own message."""
    orig = getattr(exc, "orig", None)
    if orig is None:
        message = str(exc)
    else:
        # asyncpg adapter errors render as "<class ...>: msg"; the driver's
        # own exception is chained as the cause
        cause = getattr(orig, "__cause__", None)
        message = str(cause) if cause is not None else str(orig)
    logger.warning("Store operation %s failed: %s", operation, message)
    return StoreError(message, context={"operation": operation, "error_type": type(exc).__name__})


class SqlStore(DataStore):
    """
    Relational store backed by SQLAlchemy.

    Args:
        engine: Async engine to use. The store disposes it on close().
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._session_factory: async_sessionmaker[AsyncSession] = create_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: str) -> "SqlStore":
        """Build a store with a fresh engine for `database_url`."""
        return cls(create_engine_from_url(database_url))

    # ── Profiles ──────────────────────────────────────────────────────────

    async def upsert_profile(self, user_id: str, name: str, token: str) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await session.merge(Profile(id=user_id, name=name, token=token))
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("upsert_profile", e)

    async def find_profiles_by_token(self, token: str) -> List[ProfileRecord]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(Profile).where(Profile.token == token))
                return [ProfileRecord.model_validate(p) for p in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("find_profiles_by_token", e)

    # ── Notes ─────────────────────────────────────────────────────────────

    async def upsert_note(self, note: NoteRecord) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                await session.merge(Note(**note.model_dump()))
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("upsert_note", e)

    async def get_note(self, note_id: str) -> Optional[NoteRecord]:
        try:
            async with self._session_factory() as session:
                note = await session.get(Note, note_id)
                return NoteRecord.model_validate(note) if note else None
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("get_note", e)

    async def list_notes(self, owner_id: str) -> List[NoteRecord]:
        query = (
            select(Note)
            .where(Note.owner_id == owner_id)
            .order_by(desc(Note.updated_at))
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [NoteRecord.model_validate(n) for n in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("list_notes", e)

    async def update_note(self, note_id: str, fields: Dict[str, Any]) -> None:
        if not fields:
            return
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(
                    update(Note).where(Note.id == note_id).values(**fields)
                )
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("update_note", e)

    async def delete_note(self, note_id: str) -> None:
        # Grants are removed explicitly; SQLite only honours ON DELETE CASCADE
        # with foreign_keys enabled.
        try:
            async with self._session_factory() as session, session.begin():
                await session.execute(delete(NoteShare).where(NoteShare.note_id == note_id))
                await session.execute(delete(Note).where(Note.id == note_id))
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("delete_note", e)

    # ── Shares ────────────────────────────────────────────────────────────

    async def list_shared(self, recipient_id: str) -> List[SharedNoteItem]:
        query = (
            select(NoteShare.can_edit, Note)
            .join(Note, Note.id == NoteShare.note_id)
            .where(NoteShare.shared_with == recipient_id)
            .order_by(desc(Note.updated_at))
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return [
                    SharedNoteItem(can_edit=can_edit, notes=NoteSummary.model_validate(note))
                    for can_edit, note in result.all()
                ]
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("list_shared", e)

    async def get_share(self, note_id: str, recipient_id: str) -> Optional[NoteShareRecord]:
        try:
            async with self._session_factory() as session:
                share = await session.get(NoteShare, (note_id, recipient_id))
                return NoteShareRecord.model_validate(share) if share else None
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("get_share", e)

    async def insert_share(self, share: NoteShareRecord) -> None:
        try:
            async with self._session_factory() as session, session.begin():
                session.add(NoteShare(**share.model_dump()))
        except (SQLAlchemyError, OSError) as e:
            raise _store_error("insert_share", e)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def ping(self) -> bool:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Store ping failed: %s", str(e))
            return False

    async def close(self) -> None:
        await self.engine.dispose()
