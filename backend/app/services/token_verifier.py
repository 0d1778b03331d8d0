"""
NoteSync Backend - Token Verifier
===================================

What:  Turns an Authorization header into an authenticated user.
How:   Extracts the bearer token, exchanges it with the identity provider and
       raises UnauthenticatedError when either step yields nothing.
Who:   Called by the `require_user` FastAPI dependency for protected routes.

Flow:
    header missing / not "Bearer <token>" → UnauthenticatedError("Missing Bearer token")
    provider returns no user             → UnauthenticatedError("Invalid token")
    provider unreachable / 5xx           → IdentityProviderUnavailableError (503)
    otherwise                            → AuthenticatedUser
"""

import logging
from typing import Optional

from app.exceptions import UnauthenticatedError
from app.schemas.profile import AuthenticatedUser
from app.services.identity_base import IdentityProvider

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Token part of an `Authorization: Bearer <token>` header value.

    The scheme match is case-sensitive and requires the single space; any
    other value, or an empty token, yields None.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    return authorization[len(BEARER_PREFIX):] or None


class TokenVerifier:
    """Bearer token authentication against an IdentityProvider."""

    def __init__(self, identity_provider: IdentityProvider):
        self.identity_provider = identity_provider

    async def verify(self, authorization: Optional[str]) -> AuthenticatedUser:
        token = extract_bearer_token(authorization)
        if token is None:
            raise UnauthenticatedError("Missing Bearer token")

        user = await self.identity_provider.get_user(token)
        if user is None:
            raise UnauthenticatedError("Invalid token")

        logger.debug("Authenticated user %s", user.id)
        return user
