"""
NoteSync Backend - Note Service Unit Tests
============================================

What:  Tests for NoteService (profiles, note upsert/list/update/delete).
How:   Runs against a fresh MemoryStore per test; no HTTP layer involved.

What we test:
    ✅ Profile upsert is idempotent, duplicate share tokens are a StoreError
    ✅ Notes listed newest first and scoped to the owner
    ✅ Ownership checks on upsert / update / delete
    ✅ Shared editors may update but not delete
    ✅ enforce_ownership=False goes straight to the store
"""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from app.exceptions import NotOwnerError, NoteNotFoundError, StoreError
from app.schemas.note import NoteShareRecord, NoteUpdate
from app.schemas.profile import AuthenticatedUser, ProfileRecord
from app.services.note_service import NoteService


@pytest_asyncio.fixture
async def store_with_notes(memory_store, alice, bob, note_factory):
    await memory_store.upsert_note(note_factory("a-old", alice.id, title="Old", minutes_ago=30))
    await memory_store.upsert_note(note_factory("a-new", alice.id, title="New", minutes_ago=1))
    await memory_store.upsert_note(note_factory("b-1", bob.id, title="Bob's"))
    return memory_store


class TestProfiles:

    def setup_method(self):
        self.user = ProfileRecord(id="user-alice", name="Alice", token="T1")

    @pytest.mark.asyncio
    async def test_save_profile_twice(self, memory_store):
        service = NoteService(memory_store)

        await service.save_profile(self.user)
        await service.save_profile(self.user.model_copy(update={"name": "Alice B."}))

        assert len(memory_store.profiles) == 1
        assert memory_store.profiles["user-alice"].name == "Alice B."

    @pytest.mark.asyncio
    async def test_duplicate_token_rejected(self, memory_store):
        service = NoteService(memory_store)
        await service.save_profile(self.user)

        with pytest.raises(StoreError, match="profiles_token_key"):
            await service.save_profile(ProfileRecord(id="user-bob", name="Bob", token="T1"))


class TestListNotes:

    @pytest.mark.asyncio
    async def test_newest_first_and_scoped(self, store_with_notes, alice):
        service = NoteService(store_with_notes)

        notes = await service.list_notes(alice)

        assert [n.id for n in notes] == ["a-new", "a-old"]
        assert all(n.owner_id == alice.id for n in notes)

    @pytest.mark.asyncio
    async def test_no_notes(self, memory_store):
        service = NoteService(memory_store)
        stranger = AuthenticatedUser(id="user-carol")
        assert await service.list_notes(stranger) == []

    @pytest.mark.asyncio
    async def test_list_shared(self, store_with_notes, alice, bob):
        await store_with_notes.insert_share(
            NoteShareRecord(note_id="a-new", shared_with=bob.id, can_edit=True)
        )
        service = NoteService(store_with_notes)

        items = await service.list_shared(bob)

        assert len(items) == 1
        assert items[0].can_edit is True
        assert items[0].notes.id == "a-new"
        assert await service.list_shared(alice) == []


class TestSaveNote:

    @pytest.mark.asyncio
    async def test_insert_then_overwrite(self, memory_store, alice, note_factory):
        service = NoteService(memory_store)

        await service.save_note(alice, note_factory("n1", alice.id, title="First"))
        await service.save_note(alice, note_factory("n1", alice.id, title="Second"))

        notes = await service.list_notes(alice)
        assert len(notes) == 1
        assert notes[0].title == "Second"

    @pytest.mark.asyncio
    async def test_cannot_overwrite_foreign_note(self, store_with_notes, alice, note_factory):
        service = NoteService(store_with_notes)

        with pytest.raises(NotOwnerError):
            await service.save_note(alice, note_factory("b-1", alice.id, title="Hijack"))

        stored = await store_with_notes.get_note("b-1")
        assert stored.title == "Bob's"
        assert stored.owner_id == "user-bob"

    @pytest.mark.asyncio
    async def test_unchecked_overwrite(self, store_with_notes, alice, note_factory):
        service = NoteService(store_with_notes, enforce_ownership=False)

        await service.save_note(alice, note_factory("b-1", alice.id, title="Hijack"))

        stored = await store_with_notes.get_note("b-1")
        assert stored.owner_id == alice.id


class TestUpdateNote:

    @pytest.mark.asyncio
    async def test_owner_update_is_partial(self, store_with_notes, alice):
        service = NoteService(store_with_notes)
        before = await store_with_notes.get_note("a-old")

        await service.update_note(alice, "a-old", NoteUpdate(title="Renamed"))

        after = await store_with_notes.get_note("a-old")
        assert after.title == "Renamed"
        assert after.content == before.content
        assert after.color_value == before.color_value
        assert after.updated_at > before.updated_at

    @pytest.mark.asyncio
    async def test_updated_at_always_server_time(self, store_with_notes, alice):
        service = NoteService(store_with_notes)
        fixed = datetime(2030, 1, 1, tzinfo=timezone.utc)

        await service.update_note(alice, "a-old", NoteUpdate(content="x", updated_at=fixed))

        after = await store_with_notes.get_note("a-old")
        assert after.updated_at == fixed

    @pytest.mark.asyncio
    async def test_missing_note(self, memory_store, alice):
        service = NoteService(memory_store)
        with pytest.raises(NoteNotFoundError) as exc_info:
            await service.update_note(alice, "ghost", NoteUpdate(title="x"))
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_stranger_cannot_update(self, store_with_notes, bob):
        service = NoteService(store_with_notes)
        with pytest.raises(NotOwnerError, match="permission to edit"):
            await service.update_note(bob, "a-new", NoteUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_read_only_share_cannot_update(self, store_with_notes, bob):
        await store_with_notes.insert_share(
            NoteShareRecord(note_id="a-new", shared_with=bob.id, can_edit=False)
        )
        service = NoteService(store_with_notes)

        with pytest.raises(NotOwnerError):
            await service.update_note(bob, "a-new", NoteUpdate(title="x"))

    @pytest.mark.asyncio
    async def test_editor_share_can_update(self, store_with_notes, alice, bob):
        await store_with_notes.insert_share(
            NoteShareRecord(note_id="a-new", shared_with=bob.id, can_edit=True)
        )
        service = NoteService(store_with_notes)

        await service.update_note(bob, "a-new", NoteUpdate(content="edited by bob"))

        note = await store_with_notes.get_note("a-new")
        assert note.content == "edited by bob"
        assert note.owner_id == alice.id

    @pytest.mark.asyncio
    async def test_unchecked_update_of_missing_note_is_noop(self, memory_store, alice):
        service = NoteService(memory_store, enforce_ownership=False)
        await service.update_note(alice, "ghost", NoteUpdate(title="x"))
        assert memory_store.notes == {}


class TestDeleteNote:

    @pytest.mark.asyncio
    async def test_owner_delete_removes_shares(self, store_with_notes, alice, bob):
        await store_with_notes.insert_share(
            NoteShareRecord(note_id="a-new", shared_with=bob.id, can_edit=True)
        )
        service = NoteService(store_with_notes)

        await service.delete_note(alice, "a-new")

        assert await store_with_notes.get_note("a-new") is None
        assert await service.list_shared(bob) == []

    @pytest.mark.asyncio
    async def test_editor_cannot_delete(self, store_with_notes, bob):
        await store_with_notes.insert_share(
            NoteShareRecord(note_id="a-new", shared_with=bob.id, can_edit=True)
        )
        service = NoteService(store_with_notes)

        with pytest.raises(NotOwnerError):
            await service.delete_note(bob, "a-new")
        assert await store_with_notes.get_note("a-new") is not None

    @pytest.mark.asyncio
    async def test_missing_note(self, memory_store, alice):
        service = NoteService(memory_store)
        with pytest.raises(NoteNotFoundError):
            await service.delete_note(alice, "ghost")

    @pytest.mark.asyncio
    async def test_unchecked_delete(self, store_with_notes, alice):
        service = NoteService(store_with_notes, enforce_ownership=False)

        await service.delete_note(alice, "b-1")
        await service.delete_note(alice, "ghost")

        assert await store_with_notes.get_note("b-1") is None
