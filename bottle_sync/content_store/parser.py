"""Structural validation of payloads fetched from the content store."""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from pydantic import TypeAdapter, ValidationError

from bottle_sync.content_store.models import (
    BottlePayload,
    CommentPayload,
    ContentPayload,
)

_PAYLOAD_ADAPTER: TypeAdapter[BottlePayload | CommentPayload] = TypeAdapter(
    ContentPayload
)

# pydantic error types that mean "present but of the wrong type"
_TYPE_ERRORS = {
    "string_type",
    "int_type",
    "model_type",
    "model_attributes_type",
}


class ParseFailureKind(str, Enum):
    """Why a raw blob could not be turned into a payload."""

    INVALID_JSON = "invalid_json"
    NOT_AN_OBJECT = "not_an_object"
    INVALID_KIND = "invalid_kind"
    MISSING_FIELD = "missing_field"
    WRONG_FIELD_TYPE = "wrong_field_type"
    INVALID_VALUE = "invalid_value"


@dataclass(frozen=True)
class ParseSuccess:
    """A blob that validated as a bottle or comment."""

    payload: BottlePayload | CommentPayload
    ok: bool = True


@dataclass(frozen=True)
class ParseFailure:
    """A blob that failed validation, with the first offending field."""

    kind: ParseFailureKind
    detail: str
    field: str | None = None
    ok: bool = False


ParseResult = Union[ParseSuccess, ParseFailure]


def parse_payload(raw: bytes | str | Any) -> ParseResult:
    """Parse raw content store data into a typed payload.

    Args:
        raw: JSON bytes/str as returned by the store, or an already decoded
            object

    Returns:
        ParseSuccess with the typed payload, or ParseFailure naming why the
        data was rejected
    """
    if isinstance(raw, (bytes, bytearray, str)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return ParseFailure(ParseFailureKind.INVALID_JSON, f"Invalid JSON: {e}")
    else:
        data = raw

    if not isinstance(data, dict):
        return ParseFailure(
            ParseFailureKind.NOT_AN_OBJECT, "Invalid data: not an object"
        )

    try:
        payload = _PAYLOAD_ADAPTER.validate_python(data)
    except ValidationError as e:
        return _failure_from_validation_error(e)

    return ParseSuccess(payload)


def _failure_from_validation_error(error: ValidationError) -> ParseFailure:
    """Map the first pydantic error onto a named failure kind."""
    first = error.errors()[0]
    error_type = first["type"]

    if error_type in ("union_tag_invalid", "union_tag_not_found"):
        return ParseFailure(
            ParseFailureKind.INVALID_KIND,
            'Invalid data: kind must be "bottle" or "comment"',
            "kind",
        )

    # loc starts with the union tag, e.g. ("comment", "parentEntityId")
    loc = [str(part) for part in first["loc"][1:]]
    field = ".".join(loc) if loc else None

    if error_type == "missing":
        kind = ParseFailureKind.MISSING_FIELD
        detail = f'Invalid data: missing "{field}" field'
    elif error_type in _TYPE_ERRORS:
        kind = ParseFailureKind.WRONG_FIELD_TYPE
        detail = f'Invalid data: invalid "{field}" field: {first["msg"]}'
    else:
        kind = ParseFailureKind.INVALID_VALUE
        detail = f'Invalid data: invalid "{field}" field: {first["msg"]}'

    return ParseFailure(kind, detail, field)
