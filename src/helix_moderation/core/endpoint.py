"""
Endpoint definition and supporting types.

This module defines the one abstraction every API endpoint plugs into. An
Endpoint is plain data (path, method, scopes, schemas) plus the operations
shared by all endpoints: building requests, URIs and bodies, decoding
responses, and advancing a request to the next page.
"""

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar
from urllib.parse import urlencode

from .auth import Scope
from .config import DEFAULT_ORIGIN, DecodePolicy
from .errors import ConstructionError, SerializationError
from .models import HelixBody, HelixRecord, HelixRequest, build_model
from .response import HelixResponse, PageState, decode_response

ReqT = TypeVar("ReqT", bound=HelixRequest)
RecT = TypeVar("RecT", bound=HelixRecord)


class Method(str, Enum):
    """HTTP verbs used by the API."""

    GET = "GET"
    POST = "POST"


@dataclass
class RequestSpec:
    """
    Specification for an HTTP request.

    Attributes:
        url: Full URL to request, query string included
        method: HTTP method (GET, POST)
        headers: HTTP headers as key-value pairs
        body: Serialized JSON body for POST requests
    """
    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: str | None = None


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


@dataclass(frozen=True)
class Endpoint(Generic[ReqT, RecT]):
    """
    Typed contract for one API endpoint.

    Attributes:
        path: Resource path below ``/helix/``
        method: HTTP method
        request_model: Schema of the query parameters
        record_model: Schema of each entry in the response's ``data``
        scopes: Scopes a credential must hold to call the endpoint
        body_model: Schema of each POST body entry, None for GET endpoints
        cursor_field: Request field that carries the pagination cursor,
            None for endpoints that are not paginated
    """
    path: str
    method: Method
    request_model: type[ReqT]
    record_model: type[RecT]
    scopes: frozenset[Scope] = frozenset()
    body_model: Optional[type[HelixBody]] = None
    cursor_field: Optional[str] = None

    def __post_init__(self) -> None:
        if self.cursor_field and self.cursor_field not in self.request_model.model_fields:
            raise ValueError(
                f"{self.request_model.__name__} has no cursor field {self.cursor_field!r}"
            )
        if (self.method is Method.POST) != (self.body_model is not None):
            raise ValueError(f"{self.path}: POST endpoints and only they take a body")

    @property
    def paginated(self) -> bool:
        return self.cursor_field is not None

    def request(self, **fields: Any) -> ReqT:
        """
        Build a request for this endpoint.

        Raises:
            ConstructionError: If a mandatory field is missing or a value is invalid
        """
        return build_model(self.request_model, fields)

    def query_pairs(self, request: ReqT) -> list[tuple[str, str]]:
        """
        Query parameters in field declaration order.

        Fields left at None, an empty string or an empty list are omitted;
        list fields become one parameter per element.
        """
        if not isinstance(request, self.request_model):
            raise TypeError(
                f"{self.path} expects {self.request_model.__name__}, "
                f"got {type(request).__name__}"
            )

        pairs = []
        for name, info in self.request_model.model_fields.items():
            value = getattr(request, name)
            key = info.alias or name
            if value is None or value == "":
                continue
            if isinstance(value, (list, tuple)):
                pairs.extend((key, _query_value(item)) for item in value)
            else:
                pairs.append((key, _query_value(value)))
        return pairs

    def build_uri(self, request: ReqT, origin: str = DEFAULT_ORIGIN) -> str:
        """
        Fully qualified URI for a request.

        Args:
            request: Request built for this endpoint
            origin: Scheme and host of the API

        Returns:
            ``<origin>/helix/<path>`` followed by the encoded query, if any
        """
        uri = f"{origin.rstrip('/')}/helix/{self.path}"
        query = urlencode(self.query_pairs(request))
        return f"{uri}?{query}" if query else uri

    def build_body(self, items: Iterable[HelixBody | Mapping[str, Any]]) -> str:
        """
        Serialize body entries as ``{"data": [...]}``.

        Mappings are validated into the endpoint's body model first.

        Raises:
            TypeError: If the endpoint takes no body
            ConstructionError: If a mapping is not a valid body entry
            SerializationError: If an entry cannot be represented as JSON
        """
        if self.body_model is None:
            raise TypeError(f"{self.path} does not take a request body")

        entries = []
        for item in items:
            if not isinstance(item, self.body_model):
                if not isinstance(item, Mapping):
                    raise ConstructionError(
                        self.body_model.__name__,
                        [f"body entry must be a mapping, got {type(item).__name__}"],
                    )
                item = build_model(self.body_model, dict(item))
            entries.append(item)

        try:
            return json.dumps(
                {"data": [entry.model_dump(by_alias=True) for entry in entries]},
                separators=(",", ":"),
                allow_nan=False,
            )
        except (TypeError, ValueError) as e:
            raise SerializationError(f"Cannot serialize body for {self.path}: {e}") from e

    def decode_response(
        self, raw: bytes | str, policy: DecodePolicy = DecodePolicy.STRICT
    ) -> HelixResponse[RecT]:
        """Decode a response body using this endpoint's record schema."""
        return decode_response(raw, self.record_model, policy)

    def next_request(self, request: ReqT, response: HelixResponse[RecT]) -> Optional[ReqT]:
        """
        Request for the page following ``response``.

        Returns:
            A copy of ``request`` whose cursor field holds the response's
            cursor, or None when the listing is exhausted

        Raises:
            TypeError: If the endpoint is not paginated
        """
        if self.cursor_field is None:
            raise TypeError(f"{self.path} is not paginated")

        if response.state is PageState.EXHAUSTED:
            return None

        return request.model_copy(update={self.cursor_field: response.cursor})

    def missing_scopes(self, granted: Iterable[Scope]) -> frozenset[Scope]:
        """Required scopes that ``granted`` (members or raw strings) does not cover."""
        held = {str(scope) for scope in granted}
        return frozenset(scope for scope in self.scopes if scope.value not in held)

    def prepare_request(
        self,
        request: ReqT,
        origin: str = DEFAULT_ORIGIN,
        headers: Optional[dict[str, str]] = None,
        body: Optional[Iterable[HelixBody | Mapping[str, Any]]] = None,
    ) -> RequestSpec:
        """
        Prepare an HTTP request specification.

        Args:
            request: Request built for this endpoint
            origin: Scheme and host of the API
            headers: Headers to send, usually authentication headers
            body: Body entries, required for POST endpoints

        Returns:
            A RequestSpec ready for an HTTP client
        """
        spec = RequestSpec(
            url=self.build_uri(request, origin),
            method=self.method.value,
            headers=dict(headers or {}),
        )
        if self.body_model is not None:
            if body is None:
                raise TypeError(f"{self.path} requires a request body")
            spec.body = self.build_body(body)
            spec.headers["Content-Type"] = "application/json"
        elif body is not None:
            raise TypeError(f"{self.path} does not take a request body")
        return spec
