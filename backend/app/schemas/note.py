"""
NoteSync Backend - Note and Sharing Schemas
=============================================

What:  Pydantic models for notes, share grants and the list payloads.
How:   The data stores return these records; FastAPI serializes them as
       response bodies. Validated commands built by the request validator
       are coerced into them before reaching a store.

Wire shapes kept for existing clients:
    GET /notes   → {"notes": [NoteRecord, ...]}
    GET /shared  → {"items": [{"can_edit": bool, "notes": NoteSummary}, ...]}
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    """Timezone-aware current time; the default for every `updated_at`."""
    return datetime.now(timezone.utc)


def _ensure_aware(value: datetime) -> datetime:
    # Naive timestamps (e.g. read back from SQLite) are taken as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class NoteSummary(BaseModel):
    """
    What:  A note without its owner reference.
    Who:   Embedded in each /shared item; recipients do not see owner ids.
    """
    id: str = Field(description="Client-supplied note identifier")
    title: str = Field(description="Note title")
    content: str = Field(default="", description="Note body")
    color_value: int = Field(default=0, description="ARGB colour tag")
    updated_at: datetime = Field(description="Last update (UTC ISO 8601)")

    # Clients may send numeric ids (e.g. epoch millis); stored as text
    model_config = {"from_attributes": True, "coerce_numbers_to_str": True}

    @field_validator("updated_at")
    @classmethod
    def validate_updated_at(cls, v: datetime) -> datetime:
        return _ensure_aware(v)


class NoteRecord(NoteSummary):
    """
    What:  Full note as stored, including the owner.
    Who:   Returned by GET /notes and passed to DataStore.upsert_note.

    The identifier is chosen by the client so that notes created offline keep
    their id once synced. `owner_id` is set on first upsert and never changed.
    """
    owner_id: str = Field(description="User id of the note's owner")


class NoteUpdate(BaseModel):
    """
    What:  Partial update of a note; only fields the caller sent are written.
    Who:   Built by the request validator for PUT /notes/{id}.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    color_value: Optional[int] = None
    updated_at: datetime = Field(default_factory=utcnow)

    model_config = {"coerce_numbers_to_str": True}

    def changes(self) -> Dict[str, Any]:
        """Column → value mapping with unset fields left out."""
        return self.model_dump(exclude_none=True)


class ShareGrantRequest(BaseModel):
    """Validated body of POST /share."""
    note_id: str = Field(description="Note to share")
    token: str = Field(description="Recipient's share token")
    can_edit: bool = Field(default=False, description="Grant edit permission")

    model_config = {"coerce_numbers_to_str": True}


class NoteShareRecord(BaseModel):
    """A share grant row: `note_id` is shared with user `shared_with`."""
    note_id: str
    shared_with: str
    can_edit: bool = False

    model_config = {"from_attributes": True}


class SharedNoteItem(BaseModel):
    """One entry of GET /shared: the permission flag plus the shared note."""
    can_edit: bool
    notes: NoteSummary


class NoteListResponse(BaseModel):
    """GET /notes payload, newest `updated_at` first."""
    notes: List[NoteRecord] = Field(default_factory=list)


class SharedListResponse(BaseModel):
    """GET /shared payload."""
    items: List[SharedNoteItem] = Field(default_factory=list)
