"""
Async client that dispatches endpoint requests over an injected HTTP client.

The endpoint contract does the building and decoding; this module only moves
bytes, attaches credentials and records telemetry. Nothing is retried.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from aiohttp import ClientSession, ClientTimeout
from yarl import URL

from helix_moderation.core import (
    ClientConfig,
    DecodeError,
    Endpoint,
    HelixBody,
    HelixResponse,
    Method,
    RequestError,
    RequestSpec,
    ScopeError,
    TokenProvider,
)
from helix_moderation.core.telemetry import (
    TelemetryOutcome,
    TelemetryRecorder,
    create_event,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status, headers and raw body of one HTTP exchange."""

    status: int
    body: bytes
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class HttpClient(ABC):
    """Executes a prepared request. Transport failures are raised as-is."""

    @abstractmethod
    async def send(self, spec: RequestSpec) -> HttpResponse:
        pass


class AiohttpHttpClient(HttpClient):
    """
    HttpClient backed by an aiohttp session.

    A session passed in is borrowed and left open; otherwise one is created
    on first use and closed by ``close()``.
    """

    def __init__(self, session: Optional[ClientSession] = None, timeout_s: float = 30.0):
        self._session = session
        self._owns_session = session is None
        self._timeout = ClientTimeout(total=timeout_s)

    @classmethod
    def from_config(
        cls, config: ClientConfig, session: Optional[ClientSession] = None
    ) -> "AiohttpHttpClient":
        """Create a client whose total request timeout is ``config.timeout_s``."""
        return cls(session=session, timeout_s=config.timeout_s)

    async def send(self, spec: RequestSpec) -> HttpResponse:
        if self._session is None:
            self._session = ClientSession(timeout=self._timeout)

        # The query is already encoded; keep it byte-for-byte
        url = URL(spec.url, encoded=True)
        async with self._session.request(
            spec.method, url, headers=spec.headers, data=spec.body
        ) as response:
            body = await response.read()
            return HttpResponse(
                status=response.status,
                body=body,
                headers=dict(response.headers),
            )

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> "AiohttpHttpClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


class HelixClient:
    """
    Sends endpoint requests and decodes the responses.

    Example:
        async with AiohttpHttpClient.from_config(config) as http:
            client = HelixClient(http, config=config)
            request = GET_MODERATORS.request(broadcaster_id="1234")
            async for page in client.pages(GET_MODERATORS, request, token):
                ...
    """

    def __init__(
        self,
        http: HttpClient,
        config: Optional[ClientConfig] = None,
        recorder: Optional[TelemetryRecorder] = None,
    ):
        self.http = http
        self.config = config or ClientConfig()
        self.recorder = recorder or TelemetryRecorder.from_config(self.config.telemetry)

    async def req_get(
        self, endpoint: Endpoint, request: Any, token: TokenProvider
    ) -> HelixResponse:
        """
        Send a GET request.

        Raises:
            TypeError: If the endpoint is not a GET endpoint
            ScopeError: If scope enforcement is on and the token lacks a scope
            RequestError: If the API answered with a non-2xx status
            DecodeError: If the response did not match the record schema
        """
        if endpoint.method is not Method.GET:
            raise TypeError(f"{endpoint.path} is a {endpoint.method.value} endpoint")
        return await self._dispatch(endpoint, request, token)

    async def req_post(
        self,
        endpoint: Endpoint,
        request: Any,
        body: Iterable[HelixBody | Mapping[str, Any]],
        token: TokenProvider,
    ) -> HelixResponse:
        """
        Send a POST request with ``body`` wrapped as ``{"data": [...]}``.

        Raises:
            TypeError: If the endpoint is not a POST endpoint
            SerializationError: If the body cannot be encoded
            (and everything ``req_get`` raises)
        """
        if endpoint.method is not Method.POST:
            raise TypeError(f"{endpoint.path} is a {endpoint.method.value} endpoint")
        return await self._dispatch(endpoint, request, token, body=body)

    async def pages(
        self,
        endpoint: Endpoint,
        request: Any,
        token: TokenProvider,
        max_pages: Optional[int] = None,
    ) -> AsyncIterator[HelixResponse]:
        """
        Yield pages of a listing, fetching each one only when asked for.

        Pages are requested one after another; page N+1 is built from page
        N's cursor.

        Args:
            endpoint: A paginated GET endpoint
            request: First request of the listing
            token: Credential for every page
            max_pages: Stop after this many pages, even if more exist

        Raises:
            TypeError: If the endpoint is not paginated
            ValueError: If ``max_pages`` is less than 1
        """
        if not endpoint.paginated:
            raise TypeError(f"{endpoint.path} is not paginated")
        if max_pages is not None and max_pages < 1:
            raise ValueError(f"max_pages must be at least 1, got {max_pages}")

        fetched = 0
        current = request
        while current is not None:
            response = await self.req_get(endpoint, current, token)
            fetched += 1
            yield response

            if max_pages is not None and fetched >= max_pages:
                logger.debug("Stopping %s after %d page(s)", endpoint.path, fetched)
                return
            current = endpoint.next_request(current, response)

    async def _dispatch(
        self,
        endpoint: Endpoint,
        request: Any,
        token: TokenProvider,
        body: Optional[Iterable[Any]] = None,
    ) -> HelixResponse:
        if self.config.enforce_scopes:
            missing = endpoint.missing_scopes(token.scopes)
            if missing:
                raise ScopeError(endpoint.path, missing)

        spec = endpoint.prepare_request(
            request,
            origin=self.config.origin,
            headers=token.headers(),
            body=body,
        )

        started = time.perf_counter()
        try:
            http_response = await self.http.send(spec)
        except Exception as e:
            self._record(endpoint, TelemetryOutcome.TRANSPORT_ERROR, started, error=repr(e))
            raise

        if not http_response.ok:
            error = _request_error(http_response, spec.url)
            self._record(
                endpoint,
                TelemetryOutcome.HTTP_ERROR,
                started,
                status=http_response.status,
                error=str(error),
            )
            raise error

        try:
            response = endpoint.decode_response(http_response.body, self.config.decode_policy)
        except DecodeError as e:
            self._record(
                endpoint,
                TelemetryOutcome.DECODE_ERROR,
                started,
                status=http_response.status,
                error=str(e),
            )
            raise

        self._record(
            endpoint,
            TelemetryOutcome.OK,
            started,
            status=http_response.status,
            records=len(response.data),
            has_cursor=response.cursor is not None,
        )
        return response

    def _record(
        self,
        endpoint: Endpoint,
        outcome: TelemetryOutcome,
        started: float,
        **details: Any,
    ) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        self.recorder.record(
            create_event(
                endpoint=endpoint.path,
                method=endpoint.method.value,
                outcome=outcome,
                elapsed_ms=round(elapsed_ms, 3),
                **details,
            )
        )


def _request_error(response: HttpResponse, uri: str) -> RequestError:
    """Build a RequestError from a Helix error body, which may be missing."""
    error = ""
    message = ""
    try:
        payload = json.loads(response.body)
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = str(payload.get("error", ""))
        message = str(payload.get("message", ""))
    elif response.body:
        message = response.body.decode("utf-8", errors="replace")

    return RequestError(response.status, uri, error=error, message=message)
