"""
Permission scopes and the token provider capability.

Token acquisition and refresh live outside this package; the client only
needs something that can hand out a bearer credential, the client id it
was issued for, and the scopes it was granted.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable


class Scope(str, Enum):
    """OAuth scopes relevant to the moderation endpoints."""

    MODERATION_READ = "moderation:read"
    CHANNEL_MODERATE = "channel:moderate"
    CHAT_READ = "chat:read"
    CHAT_EDIT = "chat:edit"
    USER_READ_EMAIL = "user:read:email"

    def __str__(self) -> str:
        return self.value


def parse_scopes(values: Iterable[str]) -> frozenset[Scope]:
    """
    Convert raw scope strings into Scope members.

    Raises:
        ValueError: If a value is not a known scope
    """
    return frozenset(Scope(value) for value in values)


class TokenProvider(ABC):
    """Supplies the credential attached to every dispatched request."""

    @property
    @abstractmethod
    def access_token(self) -> str:
        """Bearer token sent in the Authorization header."""
        pass

    @property
    @abstractmethod
    def client_id(self) -> str:
        """Application client id sent in the Client-Id header."""
        pass

    @property
    @abstractmethod
    def scopes(self) -> frozenset[Scope]:
        """Scopes granted to the token."""
        pass

    def headers(self) -> dict[str, str]:
        """Authentication headers for one request."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Client-Id": self.client_id,
        }


@dataclass(frozen=True)
class StaticTokenProvider(TokenProvider):
    """A token that was obtained elsewhere and never refreshes."""

    token: str
    app_client_id: str
    granted: frozenset[Scope] = field(default_factory=frozenset)

    @property
    def access_token(self) -> str:
        return self.token

    @property
    def client_id(self) -> str:
        return self.app_client_id

    @property
    def scopes(self) -> frozenset[Scope]:
        return self.granted
