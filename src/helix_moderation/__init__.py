"""Typed client for the Twitch Helix moderation endpoints."""

from helix_moderation.client import (
    AiohttpHttpClient,
    HelixClient,
    HttpClient,
    HttpResponse,
)
from helix_moderation.core import (
    ClientConfig,
    DecodePolicy,
    Endpoint,
    HelixError,
    HelixResponse,
    PageState,
    Scope,
    StaticTokenProvider,
    TokenProvider,
    load_config,
)

__all__ = [
    "AiohttpHttpClient",
    "HelixClient",
    "HttpClient",
    "HttpResponse",
    "ClientConfig",
    "DecodePolicy",
    "Endpoint",
    "HelixError",
    "HelixResponse",
    "PageState",
    "Scope",
    "StaticTokenProvider",
    "TokenProvider",
    "load_config",
]
