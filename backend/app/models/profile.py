"""
NoteSync Backend - Profile SQLAlchemy Model
=============================================

What:  ORM model for the `profiles` table.
How:   One row per user, keyed by the identity provider's user id. The share
       token is unique so a token lookup yields at most one profile.
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Profile(Base):
    """Display name and share token of a user."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)

    token: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        unique=True,
        comment="Share token other users enter to share notes with this user",
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, name={self.name!r})>"
