"""Core interfaces and types for typed endpoints."""

from helix_moderation.core.auth import (
    Scope,
    StaticTokenProvider,
    TokenProvider,
    parse_scopes,
)
from helix_moderation.core.config import (
    DEFAULT_ORIGIN,
    ClientConfig,
    ConfigValidationError,
    DecodePolicy,
    TelemetryConfig,
    load_config,
    validate_config,
)
from helix_moderation.core.endpoint import Endpoint, Method, RequestSpec
from helix_moderation.core.errors import (
    ConstructionError,
    DecodeError,
    HelixError,
    RequestError,
    ScopeError,
    SerializationError,
)
from helix_moderation.core.models import Cursor, HelixBody, HelixRecord, HelixRequest
from helix_moderation.core.response import HelixResponse, PageState, decode_response

__all__ = [
    # auth
    "Scope",
    "StaticTokenProvider",
    "TokenProvider",
    "parse_scopes",
    # config
    "DEFAULT_ORIGIN",
    "ClientConfig",
    "ConfigValidationError",
    "DecodePolicy",
    "TelemetryConfig",
    "load_config",
    "validate_config",
    # endpoint
    "Endpoint",
    "Method",
    "RequestSpec",
    # errors
    "ConstructionError",
    "DecodeError",
    "HelixError",
    "RequestError",
    "ScopeError",
    "SerializationError",
    # models
    "Cursor",
    "HelixBody",
    "HelixRecord",
    "HelixRequest",
    # response
    "HelixResponse",
    "PageState",
    "decode_response",
]
