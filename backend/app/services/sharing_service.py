"""
NoteSync Backend - Sharing Authorizer
=======================================

What:  Grants another user access to a note, identified by their share token.
Who:   Called by POST /share.

Authorization Flow (sequential; the first failing step ends the request):
    ┌───────────────┐   ┌──────────────┐   ┌─────────────┐   ┌─────────────┐   ┌──────────┐
    │ token lookup  │──▶│ not yourself │──▶│ note exists │──▶│ you own it  │──▶│ insert   │
    │ 404 not found │   │ 400          │   │ 400 unsynced│   │ 403         │   │ grant    │
    └───────────────┘   └──────────────┘   └─────────────┘   └─────────────┘   └──────────┘

No transaction spans the note read and the grant insert. Ownership never
changes once a note exists, so the owner seen at the read still holds at the
insert.
"""

import logging

from app.exceptions import (
    NoteNotSyncedError,
    NotOwnerError,
    SelfShareRejectedError,
    TokenNotFoundError,
)
from app.schemas.note import NoteShareRecord, ShareGrantRequest
from app.schemas.profile import AuthenticatedUser
from app.services.store_base import DataStore

logger = logging.getLogger(__name__)


class SharingService:
    """Runs the share-by-token authorization flow against a DataStore."""

    def __init__(self, store: DataStore):
        self.store = store

    async def share_note(self, requester: AuthenticatedUser, request: ShareGrantRequest) -> NoteShareRecord:
        """
        Share `request.note_id` with the owner of `request.token`.

        Returns:
            The grant that was stored.

        Raises:
            TokenNotFoundError:     No profile has this share token.
            SelfShareRejectedError: The token is the requester's own.
            NoteNotSyncedError:     The note is not in the store yet.
            NotOwnerError:          The note belongs to someone else.
            StoreError:             Any store call failed.
        """
        # Step 1: resolve the recipient
        profiles = await self.store.find_profiles_by_token(request.token)
        if not profiles:
            raise TokenNotFoundError(context={"note_id": request.note_id})
        recipient_id = profiles[0].id

        # Step 2: no sharing with yourself
        if recipient_id == requester.id:
            raise SelfShareRejectedError(context={"note_id": request.note_id})

        # Step 3: the note must already be synced
        note = await self.store.get_note(request.note_id)
        if note is None:
            raise NoteNotSyncedError(note_id=request.note_id)

        # Step 4: only the owner may share
        if note.owner_id != requester.id:
            logger.warning(
                "User %s tried to share note %s owned by %s",
                requester.id, note.id, note.owner_id,
            )
            raise NotOwnerError(note_id=note.id)

        # Step 5: record the grant
        share = NoteShareRecord(
            note_id=note.id,
            shared_with=recipient_id,
            can_edit=request.can_edit,
        )
        await self.store.insert_share(share)
        logger.info(
            "Note %s shared by %s with %s (can_edit=%s)",
            note.id, requester.id, recipient_id, share.can_edit,
        )
        return share
