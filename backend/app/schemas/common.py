"""
NoteSync Backend - Shared Response Schemas
============================================

What:  Response envelopes used by every router: success, error and health.
"""

from typing import Optional

from pydantic import BaseModel, Field


class OkResponse(BaseModel):
    """Body returned by every successful mutation."""
    ok: bool = True


class ErrorResponse(BaseModel):
    """
    What:  Error body produced by the global exception handlers.

    Example:
        {
            "error": "You are not the owner of this note",
            "code": "not_owner",
            "request_id": "1f3a9c2e"
        }
    """
    error: str = Field(description="Human-readable error message")
    code: Optional[str] = Field(default=None, description="Machine-readable error code")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Liveness probe; answers without touching any dependency."""
    ok: bool = True
    version: str = Field(description="Application version")
    uptime_seconds: float = Field(description="Seconds since service started")


class ReadinessResponse(BaseModel):
    """Readiness probe; reports whether the data store answers."""
    ok: bool
    store: str = Field(description="reachable or unreachable")
