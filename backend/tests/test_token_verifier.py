"""
NoteSync Backend - Token Verifier & Supabase Auth Tests
=========================================================

What:  Tests for bearer extraction, token verification and the Supabase
       Auth client.
How:   TokenVerifier runs against the FakeIdentityProvider; the Supabase
       client runs against httpx.MockTransport (no network).

What we test:
    ✅ Missing / malformed headers → "Missing Bearer token"
    ✅ Rejected tokens → "Invalid token"
    ✅ Provider outages → IdentityProviderUnavailableError
    ✅ Supabase request shape (URL, bearer, apikey) and response mapping
"""

import httpx
import pytest

from app.exceptions import IdentityProviderUnavailableError, UnauthenticatedError
from app.services.supabase_auth import SupabaseAuthProvider
from app.services.token_verifier import TokenVerifier, extract_bearer_token


class TestExtractBearerToken:

    @pytest.mark.parametrize("header", [
        None,
        "",
        "Bearer ",
        "bearer jwt-alice",
        "Basic dXNlcjpwYXNz",
        "Bearerjwt-alice",
    ])
    def test_no_token(self, header):
        assert extract_bearer_token(header) is None

    def test_token_extracted(self):
        assert extract_bearer_token("Bearer jwt-alice") == "jwt-alice"


class TestTokenVerifier:

    @pytest.mark.asyncio
    async def test_missing_header(self, identity_provider):
        verifier = TokenVerifier(identity_provider)
        with pytest.raises(UnauthenticatedError, match="Missing Bearer token"):
            await verifier.verify(None)
        assert identity_provider.calls == []

    @pytest.mark.asyncio
    async def test_invalid_token(self, identity_provider):
        verifier = TokenVerifier(identity_provider)
        with pytest.raises(UnauthenticatedError, match="Invalid token") as exc_info:
            await verifier.verify("Bearer not-a-real-jwt")
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token(self, identity_provider, alice):
        verifier = TokenVerifier(identity_provider)
        user = await verifier.verify("Bearer jwt-alice")
        assert user == alice

    @pytest.mark.asyncio
    async def test_provider_outage_propagates(self, identity_provider):
        identity_provider.available = False
        verifier = TokenVerifier(identity_provider)
        with pytest.raises(IdentityProviderUnavailableError):
            await verifier.verify("Bearer jwt-alice")


def _provider(handler) -> SupabaseAuthProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SupabaseAuthProvider(
        base_url="https://proj.supabase.co/",
        api_key="service-key",
        client=client,
    )


class TestSupabaseAuthProvider:

    @pytest.mark.asyncio
    async def test_request_shape_and_user(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["authorization"] = request.headers.get("Authorization")
            seen["apikey"] = request.headers.get("apikey")
            return httpx.Response(
                200,
                json={"id": "user-alice", "email": "alice@example.com", "role": "authenticated"},
            )

        provider = _provider(handler)
        user = await provider.get_user("jwt-alice")

        assert seen["url"] == "https://proj.supabase.co/auth/v1/user"
        assert seen["authorization"] == "Bearer jwt-alice"
        assert seen["apikey"] == "service-key"
        assert user.id == "user-alice"
        assert user.email == "alice@example.com"
        assert user.role == "authenticated"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 401, 403, 404])
    async def test_rejected_token_returns_none(self, status):
        provider = _provider(lambda request: httpx.Response(status, json={"msg": "invalid JWT"}))
        assert await provider.get_user("expired") is None

    @pytest.mark.asyncio
    async def test_response_without_id_returns_none(self):
        provider = _provider(lambda request: httpx.Response(200, json={"email": "x@example.com"}))
        assert await provider.get_user("jwt") is None

    @pytest.mark.asyncio
    async def test_non_json_body_returns_none(self):
        provider = _provider(lambda request: httpx.Response(200, text="<html>"))
        assert await provider.get_user("jwt") is None

    @pytest.mark.asyncio
    async def test_server_error_is_outage(self):
        provider = _provider(lambda request: httpx.Response(502, text="bad gateway"))
        with pytest.raises(IdentityProviderUnavailableError) as exc_info:
            await provider.get_user("jwt")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_network_error_is_outage(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        provider = _provider(handler)
        with pytest.raises(IdentityProviderUnavailableError):
            await provider.get_user("jwt")

    @pytest.mark.asyncio
    async def test_close_leaves_injected_client_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        provider = SupabaseAuthProvider("https://proj.supabase.co", "key", client=client)
        await provider.close()
        assert not client.is_closed
        await client.aclose()
