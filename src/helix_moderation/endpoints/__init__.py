"""Endpoint definitions, grouped by API section."""

from helix_moderation.endpoints.moderation import (
    CHECK_AUTOMOD_STATUS,
    ENDPOINTS,
    GET_BANNED_EVENTS,
    GET_BANNED_USERS,
    GET_MODERATOR_EVENTS,
    GET_MODERATORS,
    AutoModStatus,
    BannedEvent,
    BannedUser,
    CheckAutoModStatusBody,
    CheckAutoModStatusRequest,
    GetBannedEventsRequest,
    GetBannedUsersRequest,
    GetModeratorEventsRequest,
    GetModeratorsRequest,
    Moderator,
    ModeratorEvent,
)

__all__ = [
    "CHECK_AUTOMOD_STATUS",
    "ENDPOINTS",
    "GET_BANNED_EVENTS",
    "GET_BANNED_USERS",
    "GET_MODERATOR_EVENTS",
    "GET_MODERATORS",
    "AutoModStatus",
    "BannedEvent",
    "BannedUser",
    "CheckAutoModStatusBody",
    "CheckAutoModStatusRequest",
    "GetBannedEventsRequest",
    "GetBannedUsersRequest",
    "GetModeratorEventsRequest",
    "GetModeratorsRequest",
    "Moderator",
    "ModeratorEvent",
]
