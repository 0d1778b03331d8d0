"""
NoteSync Backend - Test Configuration (conftest.py)
=====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── alice / bob:        AuthenticatedUser instances
    ├── identity_provider:  FakeIdentityProvider mapping bearer tokens to users
    ├── memory_store:       fresh MemoryStore
    ├── app:                FastAPI app wired to the two fakes above
    ├── test_client:        HTTPX AsyncClient talking to `app` in-process
    └── auth_headers:       helper building Authorization headers per user
"""

import os

# Settings are read at import time; configure before any app import
os.environ["STORE_BACKEND"] = "memory"
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.exceptions import IdentityProviderUnavailableError
from app.schemas.note import NoteRecord
from app.schemas.profile import AuthenticatedUser
from app.services.identity_base import IdentityProvider
from app.services.memory_store import MemoryStore


class FakeIdentityProvider(IdentityProvider):
    """
    Static bearer token → user mapping.

    Set `available = False` to simulate an identity provider outage.
    """

    def __init__(self, users: Optional[Dict[str, AuthenticatedUser]] = None):
        self.users = dict(users or {})
        self.available = True
        self.calls = []

    async def get_user(self, token: str) -> Optional[AuthenticatedUser]:
        self.calls.append(token)
        if not self.available:
            raise IdentityProviderUnavailableError(context={"simulated": True})
        return self.users.get(token)


def make_note(
    note_id: str,
    owner_id: str,
    title: str = "Groceries",
    minutes_ago: int = 0,
    **fields,
) -> NoteRecord:
    """Build a NoteRecord whose updated_at is `minutes_ago` before a fixed instant."""
    base = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)
    return NoteRecord(
        id=note_id,
        owner_id=owner_id,
        title=title,
        updated_at=base - timedelta(minutes=minutes_ago),
        **fields,
    )


@pytest.fixture
def alice():
    return AuthenticatedUser(id="user-alice", email="alice@example.com")


@pytest.fixture
def bob():
    return AuthenticatedUser(id="user-bob", email="bob@example.com")


@pytest.fixture
def identity_provider(alice, bob):
    return FakeIdentityProvider({"jwt-alice": alice, "jwt-bob": bob})


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def app(memory_store, identity_provider):
    from app.main import create_app
    return create_app(
        store=memory_store,
        identity_provider=identity_provider,
        enforce_ownership=True,
    )


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers():
    """auth_headers("alice") → {"Authorization": "Bearer jwt-alice"}"""
    def build(name: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer jwt-{name}"}
    return build


@pytest.fixture
def note_factory():
    """Exposes make_note() to tests: note_factory("n1", alice.id, minutes_ago=5)."""
    return make_note
