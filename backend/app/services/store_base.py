"""
NoteSync Backend - Abstract Data Store Interface
==================================================

What:  Abstract base class for the data access gateway.
How:   Concrete stores inherit from DataStore and implement each call as a
       single round trip to their backend.
Who:   Called by NoteService and SharingService; built by `build_store()`.
When:  Once per store operation in a request.

Implementations:
    - SqlStore:    SQLAlchemy async ORM (asyncpg against Postgres)
    - MemoryStore: dict-backed fake for development and tests

Contract shared by all implementations:
    - No call is retried.
    - Any backend failure is raised as StoreError carrying the backend's
      message verbatim.
    - No ownership checks happen here; callers decide who may write what.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from app.schemas.note import NoteRecord, NoteShareRecord, SharedNoteItem
from app.schemas.profile import ProfileRecord


class DataStore(ABC):
    """Gateway to the profiles, notes and note_shares collections."""

    # ── Profiles ──────────────────────────────────────────────────────────

    @abstractmethod
    async def upsert_profile(self, user_id: str, name: str, token: str) -> None:
        """Insert or replace the profile keyed by `user_id`."""
        ...

    @abstractmethod
    async def find_profiles_by_token(self, token: str) -> List[ProfileRecord]:
        """
        Resolve a share token to profiles.

        Returns:
            Matching profiles; an empty list when the token is unknown.
        """
        ...

    # ── Notes ─────────────────────────────────────────────────────────────

    @abstractmethod
    async def upsert_note(self, note: NoteRecord) -> None:
        """Insert the note, or overwrite every column of the note with the same id."""
        ...

    @abstractmethod
    async def get_note(self, note_id: str) -> Optional[NoteRecord]:
        """Fetch one note by id, or None."""
        ...

    @abstractmethod
    async def list_notes(self, owner_id: str) -> List[NoteRecord]:
        """
        Notes owned by `owner_id`, newest `updated_at` first.

        Returns an empty list (not an error) when the owner has no notes.
        """
        ...

    @abstractmethod
    async def update_note(self, note_id: str, fields: Dict[str, Any]) -> None:
        """Write `fields` onto the note with `note_id`; a missing id is a no-op."""
        ...

    @abstractmethod
    async def delete_note(self, note_id: str) -> None:
        """Delete the note and its share grants; a missing id is a no-op."""
        ...

    # ── Shares ────────────────────────────────────────────────────────────

    @abstractmethod
    async def list_shared(self, recipient_id: str) -> List[SharedNoteItem]:
        """(can_edit, note) pairs for notes shared with `recipient_id`, newest first."""
        ...

    @abstractmethod
    async def get_share(self, note_id: str, recipient_id: str) -> Optional[NoteShareRecord]:
        """The grant for (`note_id`, `recipient_id`), or None."""
        ...

    @abstractmethod
    async def insert_share(self, share: NoteShareRecord) -> None:
        """Insert a grant. A second grant for the same pair raises StoreError."""
        ...

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def ping(self) -> bool:
        """Lightweight reachability check used by the readiness probe."""
        return True

    async def close(self) -> None:
        """Release connections; called on application shutdown."""
        return None
