"""
Stub HTTP server for integration testing the client.

This module provides a configurable stub server that plays back queued Helix
responses and records every request it receives, so tests can check the exact
bytes of the request line, headers and body.

Features:
- Queue-based response configuration
- Raw request-target capture (path and query, unparsed)
- Helper constructors for listing pages and Helix error bodies
- Async operation for integration with pytest-asyncio
"""
import asyncio
import json
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from aiohttp import web

logger = logging.getLogger(__name__)


@dataclass
class StubResponse:
    """Configuration for a single stub response."""

    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: str = '{"data": []}'
    delay: float = 0.0  # Artificial delay in seconds

    def to_dict(self) -> Dict:
        """Convert to dictionary for debugging."""
        return {
            "status": self.status,
            "headers": self.headers,
            "body": self.body,
            "delay": self.delay,
        }


class StubServer:
    """
    Configurable stub HTTP server for testing.

    The server maintains a queue of response configurations and serves them
    in order. Once the queue is empty, it returns an empty listing.

    Example:
        server = StubServer(port=18890)
        await server.start()

        server.enqueue_response(listing_response([...], cursor="abc"))
        # Point the client at server.origin

        await server.stop()
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 18890,
        default_response: Optional[StubResponse] = None
    ):
        """
        Initialize stub server.

        Args:
            host: Host to bind to
            port: Port to bind to
            default_response: Default response when queue is empty
        """
        self.host = host
        self.port = port
        self.default_response = default_response or StubResponse()

        self._response_queue: deque[StubResponse] = deque()

        # Request tracking
        self.request_count = 0
        self.request_history: List[Dict] = []

        # Server state
        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None

    @property
    def origin(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def _handle_request(self, request: web.Request) -> web.Response:
        """
        Record the incoming request and answer with the next queued response.

        Args:
            request: aiohttp request object

        Returns:
            Configured response
        """
        self.request_count += 1
        self.request_history.append({
            "method": request.method,
            "path": request.path,
            "raw_path": request.raw_path,
            "headers": dict(request.headers),
            "body": await request.text(),
        })

        logger.debug(f"Request #{self.request_count}: {request.method} {request.raw_path}")

        if self._response_queue:
            response_config = self._response_queue.popleft()
        else:
            response_config = self.default_response

        if response_config.delay > 0:
            await asyncio.sleep(response_config.delay)

        return web.Response(
            status=response_config.status,
            headers=response_config.headers,
            text=response_config.body,
            content_type="application/json"
        )

    def enqueue_response(self, response: StubResponse) -> None:
        """
        Add response to queue.

        Args:
            response: Response configuration to enqueue
        """
        self._response_queue.append(response)
        logger.debug(f"Enqueued response: {response.to_dict()}")

    def enqueue_responses(self, responses: List[StubResponse]) -> None:
        """
        Add multiple responses to queue.

        Args:
            responses: List of response configurations
        """
        for response in responses:
            self.enqueue_response(response)

    async def start(self) -> None:
        """Start the stub server."""
        if self._runner is not None:
            logger.warning("Server already started")
            return

        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self._handle_request)

        self._runner = web.AppRunner(app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        logger.info(f"Stub server started on {self.origin}")

    async def stop(self) -> None:
        """Stop the stub server."""
        if self._runner is None:
            logger.warning("Server not started")
            return

        await self._runner.cleanup()
        self._runner = None
        self._site = None

        logger.info("Stub server stopped")


def listing_response(records: List[Dict], cursor: Optional[str] = None) -> StubResponse:
    """
    Create a 200 response carrying one page of a listing.

    Args:
        records: Entries of the ``data`` array
        cursor: Continuation cursor; omitted from the body when None

    Returns:
        StubResponse configured for success
    """
    payload: Dict = {"data": records}
    if cursor is not None:
        payload["pagination"] = {"cursor": cursor}
    return StubResponse(status=200, body=json.dumps(payload))


def helix_error_response(status: int, error: str, message: str) -> StubResponse:
    """
    Create an error response shaped like the ones the API returns.

    Args:
        status: HTTP status code (4xx or 5xx)
        error: Reason phrase, e.g. "Unauthorized"
        message: Human readable explanation

    Returns:
        StubResponse configured for the error
    """
    if status < 400:
        raise ValueError(f"Status {status} is not an error")

    return StubResponse(
        status=status,
        body=json.dumps({"error": error, "status": status, "message": message}),
    )
