"""
NoteSync Backend - Supabase Auth Identity Provider
====================================================

What:  Verifies bearer tokens against Supabase Auth (GoTrue).
How:   GET {SUPABASE_URL}/auth/v1/user with the caller's token as bearer and
       the service role key as `apikey`. A 200 carries the user object.
Who:   Built by the app factory; used by TokenVerifier.

Outcome mapping:
    200 with an "id"            → AuthenticatedUser
    200 without "id", 4xx       → None (token rejected)
    5xx, timeout, network error → IdentityProviderUnavailableError

No retry and no explicit timeout: httpx transport defaults apply.
"""

import logging
from typing import Optional

import httpx

from app.exceptions import IdentityProviderUnavailableError
from app.schemas.profile import AuthenticatedUser
from app.services.identity_base import IdentityProvider

logger = logging.getLogger(__name__)


class SupabaseAuthProvider(IdentityProvider):
    """
    Identity provider backed by a Supabase project's Auth service.

    Args:
        base_url: Project URL, e.g. https://<ref>.supabase.co
        api_key:  Service role key sent as the `apikey` header
        client:   Optional pre-built AsyncClient (tests pass one with a
                  MockTransport). Created lazily otherwise and closed on close().
    """

    USER_PATH = "/auth/v1/user"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def get_user(self, token: str) -> Optional[AuthenticatedUser]:
        url = f"{self.base_url}{self.USER_PATH}"
        try:
            response = await self.client.get(
                url,
                headers={
                    "Authorization": f"Bearer {token}",
                    "apikey": self.api_key,
                },
            )
        except httpx.HTTPError as e:
            logger.error("Identity provider unreachable: %s", str(e))
            raise IdentityProviderUnavailableError(
                context={"error_type": type(e).__name__},
            )

        if response.status_code >= 500:
            logger.error("Identity provider failed with HTTP %d", response.status_code)
            raise IdentityProviderUnavailableError(
                context={"status": response.status_code},
            )

        if response.status_code != 200:
            logger.info("Identity provider rejected token (HTTP %d)", response.status_code)
            return None

        try:
            data = response.json()
        except ValueError:
            logger.warning("Identity provider returned a non-JSON body")
            return None

        user_id = data.get("id") if isinstance(data, dict) else None
        if not user_id:
            return None

        return AuthenticatedUser(id=str(user_id), email=data.get("email"), role=data.get("role"))

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
