"""
NoteSync Backend - Dependency Wiring
======================================

What:  Builders for the process-wide collaborators and the FastAPI
       dependencies that hand them to route handlers.
How:   The app factory stores one DataStore, one IdentityProvider and the
       services built on them on `app.state`; dependencies read them from
       `request.app.state`. Tests build an app with a MemoryStore and a fake
       provider without touching any of this module's builders.

Dependencies:
    require_user        → AuthenticatedUser (401/503 otherwise); also sets
                          request.state.user for the access log
    get_note_service    → NoteService
    get_sharing_service → SharingService
    json_body           → parsed JSON body ({} when empty)
"""

import logging
from typing import Any

from fastapi import Request

from app.config import Settings
from app.exceptions import InvalidRequestError
from app.schemas.profile import AuthenticatedUser
from app.services.identity_base import IdentityProvider
from app.services.memory_store import MemoryStore
from app.services.note_service import NoteService
from app.services.sharing_service import SharingService
from app.services.store_base import DataStore
from app.services.supabase_auth import SupabaseAuthProvider
from app.services.token_verifier import TokenVerifier

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Builders (called once by the app factory)
# ══════════════════════════════════════════════════════════════════════════

def build_store(settings: Settings) -> DataStore:
    """DataStore selected by STORE_BACKEND."""
    if settings.store_backend == "memory":
        logger.warning("Using in-memory store; data is lost on restart")
        return MemoryStore()

    from app.services.sql_store import SqlStore
    return SqlStore.from_url(settings.database_url)


def build_identity_provider(settings: Settings) -> IdentityProvider:
    """Supabase Auth provider for the configured project."""
    return SupabaseAuthProvider(
        base_url=settings.supabase_url,
        api_key=settings.supabase_service_role_key,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Dependencies
# ══════════════════════════════════════════════════════════════════════════

async def require_user(request: Request) -> AuthenticatedUser:
    """
    Authenticate the request from its Authorization header.

    Raises:
        UnauthenticatedError:             Missing or rejected bearer token (401)
        IdentityProviderUnavailableError: Provider outage (503)
    """
    verifier: TokenVerifier = request.app.state.token_verifier
    user = await verifier.verify(request.headers.get("Authorization"))
    request.state.user = user
    return user


def get_note_service(request: Request) -> NoteService:
    return request.app.state.note_service


def get_sharing_service(request: Request) -> SharingService:
    return request.app.state.sharing_service


def get_store(request: Request) -> DataStore:
    return request.app.state.store


async def json_body(request: Request) -> Any:
    """
    Request body parsed as JSON.

    An empty body reads as {} so that required-field checks report the
    missing fields. Unparseable JSON is an InvalidRequestError.
    """
    if not (await request.body()).strip():
        return {}
    try:
        return await request.json()
    except ValueError:
        raise InvalidRequestError("Malformed JSON body")
