"""
NoteSync Backend - Profile Schemas
====================================

What:  Pydantic models for user profiles and the authenticated caller.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ProfileRecord(BaseModel):
    """
    What:  A profile row, keyed by the owning user's id.

    `token` is the user's share token: an opaque string other users type in
    to share notes with this user. It is unique across profiles and unrelated
    to the bearer token used for authentication.
    """
    id: str = Field(description="User id (same as the identity provider's)")
    name: str = Field(description="Display name")
    token: str = Field(description="Unique share token")

    model_config = {"from_attributes": True, "coerce_numbers_to_str": True}


class AuthenticatedUser(BaseModel):
    """
    What:  Identity resolved from a bearer token for the current request.
    Who:   Produced by the token verifier; never persisted by this service.
    """
    id: str
    email: Optional[str] = None
    role: Optional[str] = None
