"""
NoteSync Backend - Profile Route
==================================

What:  POST /profile creates or updates the caller's profile.
How:   Validates name and share token, then upserts keyed by the caller's id.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends

from app.dependencies import get_note_service, json_body, require_user
from app.schemas.common import ErrorResponse, OkResponse
from app.schemas.profile import AuthenticatedUser
from app.services.note_service import NoteService
from app.services.request_validator import profile_command

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Profile"])


@router.post(
    "/profile",
    response_model=OkResponse,
    responses={
        400: {"description": "Missing fields or store error", "model": ErrorResponse},
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    },
    summary="Create or update the caller's profile",
)
async def save_profile(
    user: AuthenticatedUser = Depends(require_user),
    payload: Any = Depends(json_body),
    service: NoteService = Depends(get_note_service),
) -> OkResponse:
    await service.save_profile(profile_command(user.id, payload))
    return OkResponse()
