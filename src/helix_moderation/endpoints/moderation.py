"""
Moderation endpoints.

Each endpoint is an ``Endpoint`` instance; the request, body and record
schemas below are all they add.

Example:
    request = GET_BANNED_USERS.request(broadcaster_id="198704263", user_id=["2", "3"])
    GET_BANNED_USERS.build_uri(request)
    # https://api.twitch.tv/helix/moderation/banned?broadcaster_id=198704263&user_id=2&user_id=3
"""

from typing import Optional

from pydantic import Field, field_validator

from helix_moderation.core import (
    Cursor,
    Endpoint,
    HelixBody,
    HelixRecord,
    HelixRequest,
    Method,
    Scope,
)

MAX_USER_IDS = 100

UserIds = tuple[str, ...]


# Requests

class GetModeratorsRequest(HelixRequest):
    """Query parameters for Get Moderators."""

    # Must match the user id in the bearer token
    broadcaster_id: str
    after: Optional[Cursor] = None


class GetModeratorEventsRequest(HelixRequest):
    """Query parameters for Get Moderator Events."""

    broadcaster_id: str
    user_id: UserIds = Field(default=(), max_length=MAX_USER_IDS)
    after: Optional[Cursor] = None


class GetBannedUsersRequest(HelixRequest):
    """Query parameters for Get Banned Users."""

    broadcaster_id: str
    user_id: UserIds = Field(default=(), max_length=MAX_USER_IDS)
    after: Optional[Cursor] = None


class GetBannedEventsRequest(HelixRequest):
    """Query parameters for Get Banned Events."""

    broadcaster_id: str
    user_id: UserIds = Field(default=(), max_length=MAX_USER_IDS)
    after: Optional[Cursor] = None
    # Page size, server default is 20
    first: Optional[int] = Field(default=None, ge=1, le=100)


class CheckAutoModStatusRequest(HelixRequest):
    """Query parameters for Check AutoMod Status."""

    broadcaster_id: str


class CheckAutoModStatusBody(HelixBody):
    """One message to check against the channel's AutoMod settings."""

    msg_id: str  # caller-chosen id, echoed back in the result
    msg_text: str
    user_id: str


# Records

class Moderator(HelixRecord):
    user_id: str
    user_name: str


class ModeratorEvent(HelixRecord):
    """A moderator being added to or removed from a channel."""

    id: str
    event_type: str  # moderation.moderator.add or moderation.moderator.remove
    event_timestamp: str  # RFC3339
    version: str
    # broadcaster_id, broadcaster_name, user_id, user_name
    event_data: dict[str, str]


class BannedUser(HelixRecord):
    user_id: str
    user_name: str
    # RFC3339 for timeouts, None for permanent bans
    expires_at: Optional[str] = None

    @field_validator("expires_at", mode="before")
    @classmethod
    def _empty_is_permanent(cls, value):
        return None if value == "" else value


class BannedEvent(HelixRecord):
    """A user being banned, timed out or unbanned."""

    id: str
    event_type: str  # moderation.user.ban or moderation.user.unban
    event_timestamp: str
    version: str
    # broadcaster_id, broadcaster_name, user_id, user_name, expires_at
    event_data: dict[str, str]

    @property
    def expires_at(self) -> Optional[str]:
        """Timeout expiry, None for permanent bans and unbans."""
        return self.event_data.get("expires_at") or None


class AutoModStatus(HelixRecord):
    msg_id: str
    is_permitted: bool


# Endpoints

GET_MODERATORS = Endpoint(
    path="moderation/moderators",
    method=Method.GET,
    request_model=GetModeratorsRequest,
    record_model=Moderator,
    scopes=frozenset({Scope.MODERATION_READ}),
    cursor_field="after",
)

GET_MODERATOR_EVENTS = Endpoint(
    path="moderation/moderators/events",
    method=Method.GET,
    request_model=GetModeratorEventsRequest,
    record_model=ModeratorEvent,
    scopes=frozenset({Scope.MODERATION_READ}),
    cursor_field="after",
)

GET_BANNED_USERS = Endpoint(
    path="moderation/banned",
    method=Method.GET,
    request_model=GetBannedUsersRequest,
    record_model=BannedUser,
    scopes=frozenset({Scope.MODERATION_READ}),
    cursor_field="after",
)

GET_BANNED_EVENTS = Endpoint(
    path="moderation/banned/events",
    method=Method.GET,
    request_model=GetBannedEventsRequest,
    record_model=BannedEvent,
    scopes=frozenset({Scope.MODERATION_READ}),
    cursor_field="after",
)

CHECK_AUTOMOD_STATUS = Endpoint(
    path="moderation/enforcements/status",
    method=Method.POST,
    request_model=CheckAutoModStatusRequest,
    record_model=AutoModStatus,
    scopes=frozenset({Scope.MODERATION_READ}),
    body_model=CheckAutoModStatusBody,
)

ENDPOINTS = (
    GET_MODERATORS,
    GET_MODERATOR_EVENTS,
    GET_BANNED_USERS,
    GET_BANNED_EVENTS,
    CHECK_AUTOMOD_STATUS,
)
