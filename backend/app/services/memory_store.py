"""
NoteSync Backend - In-Memory Data Store
=========================================

What:  DataStore implementation holding profiles, notes and shares in dicts.
Who:   Used by the test suite and by local runs with STORE_BACKEND=memory.

Behaviour mirrors the SQL schema's constraints:
    - profile share tokens are unique
    - one grant per (note_id, shared_with)
    - a grant must reference an existing note
    - deleting a note deletes its grants

Records are copied on the way in and out, so callers never hold a reference
to stored state.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from app.exceptions import StoreError
from app.schemas.note import NoteRecord, NoteShareRecord, NoteSummary, SharedNoteItem
from app.schemas.profile import ProfileRecord
from app.services.store_base import DataStore

logger = logging.getLogger(__name__)


class MemoryStore(DataStore):
    """Process-local fake of the relational store."""

    def __init__(self) -> None:
        self.profiles: Dict[str, ProfileRecord] = {}
        self.notes: Dict[str, NoteRecord] = {}
        self.shares: Dict[Tuple[str, str], NoteShareRecord] = {}

    async def upsert_profile(self, user_id: str, name: str, token: str) -> None:
        for profile in self.profiles.values():
            if profile.token == token and profile.id != user_id:
                raise StoreError(
                    'duplicate key value violates unique constraint "profiles_token_key"',
                    context={"table": "profiles"},
                )
        self.profiles[user_id] = ProfileRecord(id=user_id, name=name, token=token)

    async def find_profiles_by_token(self, token: str) -> List[ProfileRecord]:
        return [p.model_copy() for p in self.profiles.values() if p.token == token]

    async def upsert_note(self, note: NoteRecord) -> None:
        self.notes[note.id] = note.model_copy()

    async def get_note(self, note_id: str) -> Optional[NoteRecord]:
        note = self.notes.get(note_id)
        return note.model_copy() if note else None

    async def list_notes(self, owner_id: str) -> List[NoteRecord]:
        owned = [n.model_copy() for n in self.notes.values() if n.owner_id == owner_id]
        owned.sort(key=lambda n: n.updated_at, reverse=True)
        return owned

    async def update_note(self, note_id: str, fields: Dict[str, Any]) -> None:
        note = self.notes.get(note_id)
        if note is None:
            return
        try:
            self.notes[note_id] = NoteRecord.model_validate({**note.model_dump(), **fields})
        except ValueError as e:
            raise StoreError(str(e), context={"table": "notes", "note_id": note_id})

    async def delete_note(self, note_id: str) -> None:
        self.notes.pop(note_id, None)
        for key in [k for k in self.shares if k[0] == note_id]:
            del self.shares[key]

    async def list_shared(self, recipient_id: str) -> List[SharedNoteItem]:
        items = [
            SharedNoteItem(
                can_edit=share.can_edit,
                notes=NoteSummary.model_validate(self.notes[share.note_id].model_dump()),
            )
            for share in self.shares.values()
            if share.shared_with == recipient_id and share.note_id in self.notes
        ]
        items.sort(key=lambda item: item.notes.updated_at, reverse=True)
        return items

    async def get_share(self, note_id: str, recipient_id: str) -> Optional[NoteShareRecord]:
        share = self.shares.get((note_id, recipient_id))
        return share.model_copy() if share else None

    async def insert_share(self, share: NoteShareRecord) -> None:
        key = (share.note_id, share.shared_with)
        if share.note_id not in self.notes:
            raise StoreError(
                'insert or update on table "note_shares" violates foreign key constraint '
                '"note_shares_note_id_fkey"',
                context={"table": "note_shares"},
            )
        if key in self.shares:
            raise StoreError(
                'duplicate key value violates unique constraint "note_shares_pkey"',
                context={"table": "note_shares"},
            )
        self.shares[key] = share.model_copy()
        logger.debug("Stored share %s -> %s", share.note_id, share.shared_with)
