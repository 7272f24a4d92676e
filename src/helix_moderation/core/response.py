"""
Response envelope and decoder.

Every listing endpoint answers with the same envelope::

    {"data": [...], "pagination": {"cursor": "<opaque>"}}

``pagination`` may be missing and ``cursor`` may be missing or empty; both
mean there is nothing more to fetch.
"""

import json
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import ValidationError

from .config import DecodePolicy
from .errors import DecodeError
from .models import Cursor, HelixRecord

RecT = TypeVar("RecT", bound=HelixRecord)

# pydantic error types mapped onto DecodeError reasons
_REASONS = {
    "missing": "missing",
    "extra_forbidden": "unknown",
}


class PageState(Enum):
    """Whether a response can be followed by another page."""

    HAS_CURSOR = "has_cursor"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class HelixResponse(Generic[RecT]):
    """
    One decoded response.

    Attributes:
        data: Decoded records, in payload order
        cursor: Continuation token, None when the listing is exhausted
    """
    data: tuple[RecT, ...]
    cursor: Optional[Cursor] = None

    @property
    def state(self) -> PageState:
        return PageState.HAS_CURSOR if self.cursor else PageState.EXHAUSTED

    def __iter__(self) -> Iterator[RecT]:
        return iter(self.data)

    def __len__(self) -> int:
        return len(self.data)


def decode_response(
    raw: bytes | str,
    record_model: type[RecT],
    policy: DecodePolicy = DecodePolicy.STRICT,
) -> HelixResponse[RecT]:
    """
    Decode a raw response body into a typed envelope.

    Args:
        raw: Response body
        record_model: Schema of each entry in ``data``
        policy: STRICT rejects unknown record fields, LENIENT drops them

    Returns:
        HelixResponse holding the decoded records and cursor

    Raises:
        DecodeError: If the payload does not match the schema
    """
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise DecodeError("malformed", f"invalid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError("malformed", "expected a JSON object")

    if "data" not in payload:
        raise DecodeError("missing", "field required", field="data")

    data = payload["data"]
    if not isinstance(data, list):
        raise DecodeError("type", "expected an array", field="data")

    records = tuple(
        _decode_record(record_model, item, index, policy)
        for index, item in enumerate(data)
    )
    return HelixResponse(data=records, cursor=_decode_cursor(payload.get("pagination")))


def _decode_record(
    record_model: type[RecT], item: Any, index: int, policy: DecodePolicy
) -> RecT:
    if not isinstance(item, dict):
        raise DecodeError("type", "expected an object", index=index)

    if policy is DecodePolicy.LENIENT:
        known = record_model.wire_fields()
        item = {key: value for key, value in item.items() if key in known}

    try:
        return record_model.model_validate(item)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        reason = _REASONS.get(first["type"], "type")
        raise DecodeError(reason, first["msg"], field=field, index=index) from e


def _decode_cursor(pagination: Any) -> Optional[Cursor]:
    if pagination is None:
        return None

    if not isinstance(pagination, dict):
        raise DecodeError("type", "expected an object", field="pagination")

    cursor = pagination.get("cursor")
    if cursor is not None and not isinstance(cursor, str):
        raise DecodeError("type", "expected a string", field="pagination.cursor")

    # An empty cursor is sent on the last page
    return cursor or None
