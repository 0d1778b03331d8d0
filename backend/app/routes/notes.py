"""
NoteSync Backend - Notes Route Handlers
=========================================

What:  Note sync endpoints for the mobile client.
How:   Each handler validates its payload, delegates to NoteService and
       returns {"ok": true} or a list payload. Errors are raised as
       NoteSyncError subclasses and formatted by the global handlers.

Route Inventory:
    POST   /notes        push a local note (upsert by client id)
    GET    /notes        the caller's notes, newest first
    GET    /shared       notes shared with the caller
    PUT    /notes/{id}   partial update (owner or can_edit recipient)
    DELETE /notes/{id}   delete (owner)
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import get_note_service, json_body, require_user
from app.schemas.common import ErrorResponse, OkResponse
from app.schemas.note import NoteListResponse, SharedListResponse
from app.schemas.profile import AuthenticatedUser
from app.services.note_service import NoteService
from app.services.request_validator import note_command, update_command

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

_AUTH_ERRORS = {
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    503: {"description": "Identity provider unavailable", "model": ErrorResponse},
}


@router.post(
    "/notes",
    response_model=OkResponse,
    responses={
        400: {"description": "Missing id/title or store error", "model": ErrorResponse},
        403: {"description": "Note id belongs to another user", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Push a local note",
    description=(
        "Inserts the note, or overwrites the stored note with the same id. "
        "content defaults to \"\", color_value to 0 and updated_at to server time."
    ),
)
async def push_note(
    user: AuthenticatedUser = Depends(require_user),
    payload: Any = Depends(json_body),
    service: NoteService = Depends(get_note_service),
) -> OkResponse:
    await service.save_note(user, note_command(user.id, payload))
    return OkResponse()


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={400: {"description": "Store error", "model": ErrorResponse}, **_AUTH_ERRORS},
    summary="List the caller's notes",
)
async def list_notes(
    user: AuthenticatedUser = Depends(require_user),
    service: NoteService = Depends(get_note_service),
) -> NoteListResponse:
    return NoteListResponse(notes=await service.list_notes(user))


@router.get(
    "/shared",
    response_model=SharedListResponse,
    responses={400: {"description": "Store error", "model": ErrorResponse}, **_AUTH_ERRORS},
    summary="List notes shared with the caller",
)
async def list_shared(
    user: AuthenticatedUser = Depends(require_user),
    service: NoteService = Depends(get_note_service),
) -> SharedListResponse:
    return SharedListResponse(items=await service.list_shared(user))


@router.put(
    "/notes/{note_id}",
    response_model=OkResponse,
    responses={
        400: {"description": "Store error", "model": ErrorResponse},
        403: {"description": "No edit permission", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Update a note",
    description="Writes title, content and color_value when present; updated_at is server time.",
)
async def update_note(
    note_id: str,
    user: AuthenticatedUser = Depends(require_user),
    payload: Any = Depends(json_body),
    service: NoteService = Depends(get_note_service),
) -> OkResponse:
    await service.update_note(user, note_id, update_command(payload))
    return OkResponse()


@router.delete(
    "/notes/{note_id}",
    response_model=OkResponse,
    responses={
        400: {"description": "Store error", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        **_AUTH_ERRORS,
    },
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    user: AuthenticatedUser = Depends(require_user),
    service: NoteService = Depends(get_note_service),
) -> OkResponse:
    await service.delete_note(user, note_id)
    return OkResponse()
