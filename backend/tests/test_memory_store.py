"""
NoteSync Backend - In-Memory Store Tests
==========================================

What:  MemoryStore behaves like the relational schema it stands in for.

What we test:
    ✅ Token lookup returns every matching profile (0 or 1 in practice)
    ✅ Foreign key and primary key violations on shares
    ✅ Records handed out are copies
    ✅ Partial updates validated against the note schema
"""

import pytest

from app.exceptions import StoreError
from app.schemas.note import NoteShareRecord
from app.services.memory_store import MemoryStore


class TestMemoryStore:

    def setup_method(self):
        self.store = MemoryStore()

    @pytest.mark.asyncio
    async def test_find_profiles_by_token(self):
        await self.store.upsert_profile("user-alice", "Alice", "T1")
        await self.store.upsert_profile("user-bob", "Bob", "T2")

        found = await self.store.find_profiles_by_token("T2")

        assert [p.id for p in found] == ["user-bob"]
        assert await self.store.find_profiles_by_token("T9") == []

    @pytest.mark.asyncio
    async def test_profile_may_keep_its_own_token(self):
        await self.store.upsert_profile("user-alice", "Alice", "T1")
        await self.store.upsert_profile("user-alice", "Alice", "T1")
        assert len(self.store.profiles) == 1

    @pytest.mark.asyncio
    async def test_share_needs_existing_note(self):
        with pytest.raises(StoreError, match="foreign key"):
            await self.store.insert_share(NoteShareRecord(note_id="ghost", shared_with="user-bob"))

    @pytest.mark.asyncio
    async def test_duplicate_share(self, note_factory):
        await self.store.upsert_note(note_factory("n1", "user-alice"))
        share = NoteShareRecord(note_id="n1", shared_with="user-bob")

        await self.store.insert_share(share)
        with pytest.raises(StoreError, match="note_shares_pkey"):
            await self.store.insert_share(share.model_copy(update={"can_edit": True}))

        stored = await self.store.get_share("n1", "user-bob")
        assert stored.can_edit is False

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, note_factory):
        await self.store.upsert_note(note_factory("n1", "user-alice", title="Original"))

        fetched = await self.store.get_note("n1")
        fetched.title = "Mutated"

        assert (await self.store.get_note("n1")).title == "Original"

    @pytest.mark.asyncio
    async def test_update_rejects_bad_value(self, note_factory):
        await self.store.upsert_note(note_factory("n1", "user-alice"))
        with pytest.raises(StoreError):
            await self.store.update_note("n1", {"color_value": "not-a-number"})

    @pytest.mark.asyncio
    async def test_shared_list_newest_first(self, note_factory):
        await self.store.upsert_note(note_factory("old", "user-alice", minutes_ago=10))
        await self.store.upsert_note(note_factory("new", "user-alice", minutes_ago=0))
        await self.store.insert_share(NoteShareRecord(note_id="old", shared_with="user-bob"))
        await self.store.insert_share(
            NoteShareRecord(note_id="new", shared_with="user-bob", can_edit=True)
        )

        items = await self.store.list_shared("user-bob")

        assert [(i.notes.id, i.can_edit) for i in items] == [("new", True), ("old", False)]

    @pytest.mark.asyncio
    async def test_ping(self):
        assert await self.store.ping() is True
