"""
NoteSync Backend - Sharing Route
==================================

What:  POST /share grants another user access to one of the caller's notes.
How:   Body {note_id, token, can_edit?}; the flow lives in SharingService.

Error responses:
    400 missing fields, self-share, note not synced, store error
    403 caller does not own the note
    404 share token not found
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import get_sharing_service, json_body, require_user
from app.schemas.common import ErrorResponse, OkResponse
from app.schemas.profile import AuthenticatedUser
from app.services.request_validator import share_command
from app.services.sharing_service import SharingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sharing"])


@router.post(
    "/share",
    response_model=OkResponse,
    responses={
        400: {"description": "Invalid request or share rejected", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        403: {"description": "Not the owner of the note", "model": ErrorResponse},
        404: {"description": "Share token not found", "model": ErrorResponse},
    },
    summary="Share a note by the recipient's share token",
)
async def share_note(
    user: AuthenticatedUser = Depends(require_user),
    payload: Any = Depends(json_body),
    service: SharingService = Depends(get_sharing_service),
) -> OkResponse:
    await service.share_note(user, share_command(payload))
    return OkResponse()
