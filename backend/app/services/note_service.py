"""
NoteSync Backend - Note Service
=================================

What:  Profile and note operations on top of the data store.
How:   Receives an injected DataStore; every method is one validated command
       forwarded to the store, guarded by ownership checks when enabled.
Who:   Called by the profile and notes route handlers.

Ownership (enforce_ownership=True, the default):
    upsert  → rejected when the id belongs to another user's note
    update  → owner, or a recipient whose share has can_edit=True
    delete  → owner only
    With enforce_ownership=False these calls go straight to the store, and
    update/delete of an unknown id is a silent no-op.

NoteService is stateless apart from its collaborators, so one instance serves
every request.
"""

import logging
from typing import List

from app.exceptions import NotOwnerError, NoteNotFoundError
from app.schemas.note import NoteRecord, NoteUpdate, SharedNoteItem
from app.schemas.profile import AuthenticatedUser, ProfileRecord
from app.services.store_base import DataStore

logger = logging.getLogger(__name__)


class NoteService:
    """
    Business logic for profiles and notes.

    Args:
        store:             Data access gateway
        enforce_ownership: Check ownership / edit permission before mutating
    """

    def __init__(self, store: DataStore, enforce_ownership: bool = True):
        self.store = store
        self.enforce_ownership = enforce_ownership

    async def save_profile(self, profile: ProfileRecord) -> None:
        """Create or replace the caller's profile (idempotent)."""
        await self.store.upsert_profile(profile.id, profile.name, profile.token)
        logger.info("Profile saved for user %s", profile.id)

    async def save_note(self, user: AuthenticatedUser, note: NoteRecord) -> None:
        """
        Push a client note to the store (insert or overwrite by id).

        Raises:
            NotOwnerError: The id already belongs to another user's note.
            StoreError:    The store rejected the write.
        """
        if self.enforce_ownership:
            existing = await self.store.get_note(note.id)
            if existing is not None and existing.owner_id != user.id:
                logger.warning(
                    "User %s tried to overwrite note %s owned by %s",
                    user.id, note.id, existing.owner_id,
                )
                raise NotOwnerError(note_id=note.id)

        await self.store.upsert_note(note)
        logger.info("Note %s saved by %s", note.id, user.id)

    async def list_notes(self, user: AuthenticatedUser) -> List[NoteRecord]:
        """The caller's notes, newest first."""
        return await self.store.list_notes(user.id)

    async def list_shared(self, user: AuthenticatedUser) -> List[SharedNoteItem]:
        """Notes other users shared with the caller, each with its edit flag."""
        return await self.store.list_shared(user.id)

    async def update_note(self, user: AuthenticatedUser, note_id: str, update: NoteUpdate) -> None:
        """
        Apply a partial update; `updated_at` is always set to server time.

        Raises:
            NoteNotFoundError: Ownership is enforced and the note does not exist.
            NotOwnerError:     Caller neither owns the note nor may edit it.
        """
        if self.enforce_ownership:
            await self._require_edit_permission(user, note_id)

        await self.store.update_note(note_id, update.changes())
        logger.info("Note %s updated by %s", note_id, user.id)

    async def delete_note(self, user: AuthenticatedUser, note_id: str) -> None:
        """
        Delete a note and its share grants.

        Raises:
            NoteNotFoundError: Ownership is enforced and the note does not exist.
            NotOwnerError:     Caller is not the owner.
        """
        if self.enforce_ownership:
            note = await self.store.get_note(note_id)
            if note is None:
                raise NoteNotFoundError(note_id=note_id)
            if note.owner_id != user.id:
                logger.warning("User %s tried to delete note %s", user.id, note_id)
                raise NotOwnerError(note_id=note_id)

        await self.store.delete_note(note_id)
        logger.info("Note %s deleted by %s", note_id, user.id)

    async def _require_edit_permission(self, user: AuthenticatedUser, note_id: str) -> None:
        note = await self.store.get_note(note_id)
        if note is None:
            raise NoteNotFoundError(note_id=note_id)
        if note.owner_id == user.id:
            return

        share = await self.store.get_share(note_id, user.id)
        if share is None or not share.can_edit:
            logger.warning("User %s has no edit permission on note %s", user.id, note_id)
            raise NotOwnerError(
                message="You do not have permission to edit this note",
                note_id=note_id,
            )
