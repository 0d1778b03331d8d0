"""
NoteSync Backend - Note & NoteShare SQLAlchemy Models
=======================================================

What:  ORM models for the `notes` and `note_shares` tables.
Who:   Used by SqlStore for every note query and by Alembic.

Table Design:
    notes
    - id: client-supplied string; notes are created offline and keep their id
    - owner_id: set on creation, never reassigned by the service
    - color_value: BigInteger, ARGB colours exceed the signed 32-bit range
    - updated_at: timezone-aware; listings sort on it newest first

    note_shares
    - composite primary key (note_id, shared_with): one grant per pair
    - note_id cascades on delete so removing a note removes its grants

Query Patterns:
    - Own notes: WHERE owner_id = :uid ORDER BY updated_at DESC
      → idx_notes_owner_updated
    - Shared with me: note_shares JOIN notes WHERE shared_with = :uid
      → idx_note_shares_shared_with
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Note(Base):
    """A note owned by one user, optionally shared with others."""

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    owner_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="User id of the note's owner",
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    color_value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="Last update (UTC); client-supplied on push, server time on edit",
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, owner_id={self.owner_id}, title={self.title[:20]!r})>"


class NoteShare(Base):
    """Grant giving user `shared_with` access to a note, optionally with edit rights."""

    __tablename__ = "note_shares"

    note_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("notes.id", ondelete="CASCADE"),
        primary_key=True,
    )

    shared_with: Mapped[str] = mapped_column(String(64), primary_key=True)

    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_note_shares_shared_with", "shared_with"),
    )

    def __repr__(self) -> str:
        return (
            f"<NoteShare(note_id={self.note_id}, shared_with={self.shared_with}, "
            f"can_edit={self.can_edit})>"
        )


Index("idx_notes_owner_updated", Note.owner_id, Note.updated_at.desc())
