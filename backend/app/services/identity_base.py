"""
NoteSync Backend - Abstract Identity Provider Interface
=========================================================

What:  Contract for exchanging a bearer token for a user identity.
Who:   Called by TokenVerifier once per authenticated request.

Implementations:
    - SupabaseAuthProvider: Supabase Auth (GoTrue) over HTTP
    - Tests substitute a static token → user mapping
"""

from abc import ABC, abstractmethod
from typing import Optional

from app.schemas.profile import AuthenticatedUser


class IdentityProvider(ABC):
    """Resolves bearer tokens to users."""

    @abstractmethod
    async def get_user(self, token: str) -> Optional[AuthenticatedUser]:
        """
        Exchange `token` for the user it was issued to.

        Returns:
            The user, or None when the provider rejects the token.

        Raises:
            IdentityProviderUnavailableError: The provider could not be reached
                or failed on its side. Never retried.
        """
        ...

    async def close(self) -> None:
        """Release network resources; called on application shutdown."""
        return None
