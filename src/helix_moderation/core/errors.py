"""
Error types raised by the typed endpoint contract and the client.

Every failure is surfaced to the caller; nothing here is retried.
Transport errors are not wrapped and propagate from the HTTP client as-is.
"""

from typing import Optional


class HelixError(Exception):
    """Base class for all errors raised by this package."""


class ConstructionError(HelixError):
    """A request or body could not be built from the supplied fields."""

    def __init__(self, model: str, problems: list[str]):
        self.model = model
        self.problems = problems
        super().__init__(f"Cannot build {model}: {'; '.join(problems)}")


class SerializationError(HelixError):
    """A request body could not be encoded as JSON."""


class DecodeError(HelixError):
    """
    Response payload did not match the declared schema.

    Attributes:
        reason: One of "missing", "type", "unknown" or "malformed"
        field: Offending field name, if known
        index: Index of the offending record in ``data``; None for envelope errors
    """

    def __init__(
        self,
        reason: str,
        detail: str,
        field: Optional[str] = None,
        index: Optional[int] = None,
    ):
        self.reason = reason
        self.detail = detail
        self.field = field
        self.index = index

        where = "envelope" if index is None else f"data[{index}]"
        if field:
            where = f"{where}.{field}"
        super().__init__(f"{reason} at {where}: {detail}")


class ScopeError(HelixError):
    """The credential does not hold every scope an endpoint requires."""

    def __init__(self, path: str, missing: frozenset):
        self.path = path
        self.missing = missing
        names = ", ".join(sorted(str(scope) for scope in missing))
        super().__init__(f"Endpoint {path} requires missing scope(s): {names}")


class RequestError(HelixError):
    """The API answered with a non-2xx status."""

    def __init__(self, status: int, uri: str, error: str = "", message: str = ""):
        self.status = status
        self.uri = uri
        self.error = error
        self.message = message
        text = f"{status} {error or 'error'} for {uri}"
        super().__init__(f"{text}: {message}" if message else text)
