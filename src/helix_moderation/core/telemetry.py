"""
Structured telemetry for dispatched API requests.

This module provides structured logging for understanding:
- Which endpoints are called and how long they take
- How often calls fail, and at which stage (HTTP status, decoding, transport)
- How many records and pages a listing produced
"""
import json
import logging
import threading
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from .config import TelemetryConfig

logger = logging.getLogger(__name__)


class TelemetryLevel(Enum):
    """Telemetry verbosity levels."""
    INFO = "info"
    DEBUG = "debug"


class TelemetryOutcome(Enum):
    """How a dispatched request ended."""
    OK = "ok"                            # 2xx and decoded
    HTTP_ERROR = "http_error"            # non-2xx status
    DECODE_ERROR = "decode_error"        # 2xx but payload did not match schema
    TRANSPORT_ERROR = "transport_error"  # HTTP client raised


@dataclass
class TelemetryEvent:
    """
    A single telemetry event for one dispatched request.

    Attributes:
        timestamp: ISO 8601 timestamp of event
        endpoint: Endpoint path (e.g., "moderation/banned")
        method: HTTP method
        status: HTTP status code (None if the transport failed)
        elapsed_ms: Request duration in milliseconds
        outcome: How the request ended
        records: Number of decoded records
        has_cursor: Whether the response pointed to another page
        error: Error text for failed requests
    """
    timestamp: str
    endpoint: str
    method: str
    status: Optional[int]
    elapsed_ms: float
    outcome: str
    records: int = 0
    has_cursor: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for logging."""
        return {k: v for k, v in asdict(self).items() if v is not None or k == "status"}

    def to_json(self) -> str:
        """Convert event to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def to_keyvalue(self) -> str:
        """Convert event to key=value format."""
        return " ".join(f"{key}={value}" for key, value in self.to_dict().items())


@dataclass
class TelemetryStats:
    """
    Aggregated statistics for telemetry analysis.

    Useful for tests and runtime monitoring.
    """
    total_requests: int = 0
    total_errors: int = 0
    total_records: int = 0
    total_elapsed_time: float = 0.0
    outcomes_by_type: Dict[str, int] = field(default_factory=dict)
    status_codes: Dict[int, int] = field(default_factory=dict)


class TelemetryRecorder:
    """
    Records and emits structured telemetry for API requests.

    Features:
    - Structured logging in JSON or key=value format
    - Configurable verbosity (info/debug)
    - Optional in-memory statistics collection
    - Thread-safe operation
    """

    def __init__(
        self,
        level: TelemetryLevel = TelemetryLevel.INFO,
        format_json: bool = True,
        collect_stats: bool = False
    ):
        """
        Initialize telemetry recorder.

        Args:
            level: Logging verbosity level
            format_json: If True, log as JSON; otherwise use key=value
            collect_stats: If True, collect in-memory statistics
        """
        self.level = level
        self.format_json = format_json
        self.collect_stats = collect_stats

        self._stats = TelemetryStats()
        self._stats_lock = threading.Lock()

        # Event history (for testing)
        self._events: List[TelemetryEvent] = []
        self._events_lock = threading.Lock()

    @classmethod
    def from_config(cls, config: TelemetryConfig) -> "TelemetryRecorder":
        """Create a recorder from the telemetry section of the client config."""
        return cls(
            level=TelemetryLevel(config.level),
            format_json=config.format_json,
            collect_stats=config.collect_stats,
        )

    def record(self, event: TelemetryEvent) -> None:
        """
        Record a telemetry event.

        Args:
            event: Event to record
        """
        if self.format_json:
            log_message = f"helix.request {event.to_json()}"
        else:
            log_message = f"helix.request {event.to_keyvalue()}"

        # Failures are visible at INFO, everything else only at DEBUG
        if self.level == TelemetryLevel.DEBUG or event.outcome == TelemetryOutcome.OK.value:
            logger.debug(log_message)
        else:
            logger.info(log_message)

        if self.collect_stats:
            with self._stats_lock:
                self._stats.total_requests += 1
                self._stats.total_elapsed_time += event.elapsed_ms
                self._stats.total_records += event.records

                if event.outcome != TelemetryOutcome.OK.value:
                    self._stats.total_errors += 1

                self._stats.outcomes_by_type[event.outcome] = (
                    self._stats.outcomes_by_type.get(event.outcome, 0) + 1
                )

                if event.status:
                    self._stats.status_codes[event.status] = (
                        self._stats.status_codes.get(event.status, 0) + 1
                    )

        with self._events_lock:
            self._events.append(event)

    def get_stats(self) -> TelemetryStats:
        """Get current statistics snapshot."""
        with self._stats_lock:
            return TelemetryStats(
                total_requests=self._stats.total_requests,
                total_errors=self._stats.total_errors,
                total_records=self._stats.total_records,
                total_elapsed_time=self._stats.total_elapsed_time,
                outcomes_by_type=self._stats.outcomes_by_type.copy(),
                status_codes=self._stats.status_codes.copy(),
            )

    def reset_stats(self) -> None:
        """Reset statistics."""
        with self._stats_lock:
            self._stats = TelemetryStats()

    def get_events(self) -> List[TelemetryEvent]:
        """Get all recorded events (for testing)."""
        with self._events_lock:
            return self._events.copy()

    def clear_events(self) -> None:
        """Clear event history."""
        with self._events_lock:
            self._events.clear()


def create_event(
    endpoint: str,
    method: str,
    outcome: TelemetryOutcome,
    status: Optional[int] = None,
    elapsed_ms: float = 0.0,
    records: int = 0,
    has_cursor: bool = False,
    error: Optional[str] = None,
) -> TelemetryEvent:
    """
    Helper to create a telemetry event with current timestamp.

    Args:
        endpoint: Endpoint path
        method: HTTP method
        outcome: How the request ended
        status: HTTP status code
        elapsed_ms: Request duration in milliseconds
        records: Number of decoded records
        has_cursor: Whether another page is available
        error: Error text for failed requests

    Returns:
        TelemetryEvent ready for recording
    """
    return TelemetryEvent(
        timestamp=datetime.now(timezone.utc).isoformat(),
        endpoint=endpoint,
        method=method,
        status=status,
        elapsed_ms=elapsed_ms,
        outcome=outcome.value,
        records=records,
        has_cursor=has_cursor,
        error=error,
    )
