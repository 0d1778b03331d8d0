"""
NoteSync Backend - Request Validator
======================================

What:  Per-operation payload contracts: required fields, accepted fields and
       defaults, kept in one table instead of inline fallbacks in handlers.
How:   `validate_payload()` checks presence, picks accepted fields, applies
       defaults and returns a plain dict; the `*_command()` helpers coerce that
       dict into the typed record the services expect.
Who:   Called by route handlers before any store access.

Contract Table:
    ┌────────────────┬────────────────┬──────────────────────────────────────────┐
    │ Operation      │ Required       │ Defaults                                 │
    ├────────────────┼────────────────┼──────────────────────────────────────────┤
    │ upsert_profile │ name, token    │ -                                        │
    │ upsert_note    │ id, title      │ content="", color_value=0, updated_at=now│
    │ share_note     │ note_id, token │ can_edit=False                           │
    │ update_note    │ -              │ updated_at=now (never taken from client) │
    └────────────────┴────────────────┴──────────────────────────────────────────┘

Presence rule:
    A field counts as missing when it is absent or falsy (None, "", 0, False).
    An accepted field sent as null is treated as absent.
    Types are not checked beyond that: a number sent for a text field is
    kept as its decimal text.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Tuple

from pydantic import ValidationError as PydanticValidationError

from app.exceptions import InvalidRequestError
from app.schemas.note import NoteRecord, NoteUpdate, ShareGrantRequest, utcnow
from app.schemas.profile import ProfileRecord


@dataclass(frozen=True)
class OperationContract:
    """Shape of one operation's payload."""

    required: Tuple[str, ...]
    accepted: Tuple[str, ...]
    defaults: Mapping[str, Callable[[], Any]] = field(default_factory=dict)

    def missing_message(self) -> str:
        return f"{' and '.join(self.required)} are required"


OPERATION_CONTRACTS: Dict[str, OperationContract] = {
    "upsert_profile": OperationContract(
        required=("name", "token"),
        accepted=("name", "token"),
    ),
    "upsert_note": OperationContract(
        required=("id", "title"),
        accepted=("id", "title", "content", "color_value", "updated_at"),
        defaults={
            "content": lambda: "",
            "color_value": lambda: 0,
            "updated_at": utcnow,
        },
    ),
    "share_note": OperationContract(
        required=("note_id", "token"),
        accepted=("note_id", "token", "can_edit"),
        defaults={"can_edit": lambda: False},
    ),
    "update_note": OperationContract(
        required=(),
        accepted=("title", "content", "color_value"),
        defaults={"updated_at": utcnow},
    ),
}


def validate_payload(operation: str, payload: Any) -> Dict[str, Any]:
    """
    Check `payload` against the contract for `operation`.

    Returns:
        Accepted fields the caller sent (nulls dropped) plus defaults for the
        ones it did not.

    Raises:
        InvalidRequestError: Body is not an object, or required fields are missing.
        KeyError: Unknown operation name (a programming error).
    """
    contract = OPERATION_CONTRACTS[operation]

    if not isinstance(payload, dict):
        raise InvalidRequestError(
            "Request body must be a JSON object",
            context={"operation": operation},
        )

    missing = tuple(name for name in contract.required if not payload.get(name))
    if missing:
        raise InvalidRequestError(
            contract.missing_message(),
            missing=list(missing),
            context={"operation": operation},
        )

    values = {
        name: payload[name]
        for name in contract.accepted
        if payload.get(name) is not None
    }
    for name, default in contract.defaults.items():
        if name not in values:
            values[name] = default()
    return values


def _coerce(operation: str, model, values: Dict[str, Any]):
    try:
        return model.model_validate(values)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise InvalidRequestError(
            f"Invalid value for {location}: {first.get('msg', 'invalid')}",
            context={"operation": operation, "errors": e.errors(include_url=False)},
        )


# ── Typed commands ────────────────────────────────────────────────────────

def profile_command(user_id: str, payload: Any) -> ProfileRecord:
    """Validated profile for POST /profile, owned by `user_id`."""
    values = validate_payload("upsert_profile", payload)
    return _coerce("upsert_profile", ProfileRecord, {**values, "id": user_id})


def note_command(owner_id: str, payload: Any) -> NoteRecord:
    """Validated note for POST /notes; the owner is always the caller."""
    values = validate_payload("upsert_note", payload)
    return _coerce("upsert_note", NoteRecord, {**values, "owner_id": owner_id})


def share_command(payload: Any) -> ShareGrantRequest:
    """Validated share request for POST /share; `can_edit` is taken by truthiness."""
    values = validate_payload("share_note", payload)
    values["can_edit"] = bool(values["can_edit"])
    return _coerce("share_note", ShareGrantRequest, values)


def update_command(payload: Any) -> NoteUpdate:
    """Validated partial update for PUT /notes/{id}."""
    values = validate_payload("update_note", payload)
    return _coerce("update_note", NoteUpdate, values)
