"""
NoteSync Backend - Custom Exception Hierarchy
===============================================

What:  Application-specific exceptions for every failure a request can end in.
How:   Each exception class carries a message, an optional context dict, an
       HTTP status code and a machine-readable code. Global exception handlers
       (registered in main.py) turn them into JSON error responses.
Who:   Raised by the token verifier, the request validator, the services and
       the data stores; caught by the global handlers.
When:  During request processing. None of them is retried.

Exception Hierarchy:
    NoteSyncError (base)
    ├── UnauthenticatedError              → 401
    ├── InvalidRequestError               → 400 (missing/malformed fields)
    ├── TokenNotFoundError                → 404 (share token unknown)
    ├── SelfShareRejectedError            → 400
    ├── NoteNotSyncedError                → 400 (note not stored server-side yet)
    ├── NotOwnerError                     → 403
    ├── NoteNotFoundError                 → 404
    ├── StoreError                        → 400 (store message passed through)
    └── IdentityProviderUnavailableError  → 503
"""

from typing import Any, Dict, List, Optional


class NoteSyncError(Exception):
    """
    Base exception for all NoteSync application errors.

    Attributes:
        message:  User-facing error description (returned as `error` in the body)
        context:  Additional debug info (logged, NOT returned to the client)
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class UnauthenticatedError(NoteSyncError):
    """
    Raised when a protected route is called without a usable bearer token.

    Two messages are used by the token verifier:
        "Missing Bearer token": no Authorization header, or not a Bearer one
        "Invalid token":        the identity provider rejected the token
    """

    status_code = 401
    code = "unauthenticated"

    def __init__(
        self,
        message: str = "Invalid token",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidRequestError(NoteSyncError):
    """
    Raised when a request body fails its operation contract.

    When:    Required fields missing, body not a JSON object, or a value that
             cannot be coerced into the stored type.
    HTTP:    400 Bad Request. Raised before any store access.
    """

    status_code = 400
    code = "invalid_request"

    def __init__(
        self,
        message: str = "Invalid request",
        missing: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if missing:
            ctx["missing"] = list(missing)
        super().__init__(message=message, context=ctx)
        self.missing = list(missing or [])


class TokenNotFoundError(NoteSyncError):
    """No profile carries the share token the caller asked to share with."""

    status_code = 404
    code = "token_not_found"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Token not found", context=context)


class SelfShareRejectedError(NoteSyncError):
    """The share token resolves to the requester."""

    status_code = 400
    code = "self_share_rejected"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="You cannot share a note with yourself", context=context)


class NoteNotSyncedError(NoteSyncError):
    """
    The note to share does not exist server-side.

    Notes are created offline on the client and pushed later; a share request
    can arrive before the note itself has been synced.
    """

    status_code = 400
    code = "note_not_synced"

    def __init__(self, note_id: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if note_id:
            ctx["note_id"] = note_id
        super().__init__(message="Note not synced yet (sync first)", context=ctx)


class NotOwnerError(NoteSyncError):
    """The requester may not perform this action on someone else's note."""

    status_code = 403
    code = "not_owner"

    def __init__(
        self,
        message: str = "You are not the owner of this note",
        note_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if note_id:
            ctx["note_id"] = note_id
        super().__init__(message=message, context=ctx)


class NoteNotFoundError(NoteSyncError):
    """Raised by ownership-checked mutations when the target note does not exist."""

    status_code = 404
    code = "note_not_found"

    def __init__(self, note_id: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        message = "Note not found"
        ctx = context or {}
        if note_id:
            message = f"Note with ID '{note_id}' was not found"
            ctx["note_id"] = note_id
        super().__init__(message=message, context=ctx)


class StoreError(NoteSyncError):
    """
    Raised when a data store call fails.

    What:    Any failure of the underlying store (constraint violation, lost
             connection, bad value for a column).
    HTTP:    400 Bad Request, with the store's own message in the body.
    Recovery: None. The request ends; nothing is rolled back by this service.
    """

    status_code = 400
    code = "store_error"

    def __init__(
        self,
        message: str = "Data store operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class IdentityProviderUnavailableError(NoteSyncError):
    """
    Raised when the identity provider cannot be reached or answers with 5xx.

    Distinguished from UnauthenticatedError so that an auth outage is not
    reported to clients as a bad token.
    """

    status_code = 503
    code = "identity_provider_unavailable"

    def __init__(
        self,
        message: str = "Authentication service is temporarily unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
