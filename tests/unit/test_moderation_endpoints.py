"""
Unit tests for the moderation endpoint definitions.

Each endpoint is checked against the URI the API documents for it and
against the sample payload from the API reference.
"""

import json

import pytest

from helix_moderation.core import (
    ConstructionError,
    DecodeError,
    DecodePolicy,
    Method,
    PageState,
    Scope,
)
from helix_moderation.endpoints import (
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
    Moderator,
    ModeratorEvent,
)
from tests import samples

BROADCASTER = "198704263"


class TestEndpointTable:
    """Tests for the static endpoint data."""

    def test_paths(self):
        assert [endpoint.path for endpoint in ENDPOINTS] == [
            "moderation/moderators",
            "moderation/moderators/events",
            "moderation/banned",
            "moderation/banned/events",
            "moderation/enforcements/status",
        ]

    def test_all_require_moderation_read(self):
        for endpoint in ENDPOINTS:
            assert endpoint.scopes == frozenset({Scope.MODERATION_READ})

    def test_only_automod_check_posts(self):
        methods = {endpoint.path: endpoint.method for endpoint in ENDPOINTS}

        assert methods.pop("moderation/enforcements/status") is Method.POST
        assert set(methods.values()) == {Method.GET}

    def test_listings_are_paginated(self):
        assert GET_MODERATORS.paginated
        assert GET_MODERATOR_EVENTS.paginated
        assert GET_BANNED_USERS.paginated
        assert GET_BANNED_EVENTS.paginated
        assert not CHECK_AUTOMOD_STATUS.paginated


class TestMandatoryOnlyUris:
    """A request with only the broadcaster id set carries nothing else."""

    @pytest.mark.parametrize(
        "endpoint, path",
        [
            (GET_MODERATORS, "moderation/moderators"),
            (GET_MODERATOR_EVENTS, "moderation/moderators/events"),
            (GET_BANNED_USERS, "moderation/banned"),
            (GET_BANNED_EVENTS, "moderation/banned/events"),
            (CHECK_AUTOMOD_STATUS, "moderation/enforcements/status"),
        ],
    )
    def test_uri(self, endpoint, path):
        request = endpoint.request(broadcaster_id=BROADCASTER)

        assert endpoint.build_uri(request) == (
            f"https://api.twitch.tv/helix/{path}?broadcaster_id={BROADCASTER}"
        )

    @pytest.mark.parametrize("endpoint", ENDPOINTS)
    def test_broadcaster_is_mandatory(self, endpoint):
        with pytest.raises(ConstructionError, match="broadcaster_id"):
            endpoint.request()


class TestFilteredUris:
    """List-valued filters become repeated query parameters."""

    def test_banned_users_filter(self):
        request = GET_BANNED_USERS.request(broadcaster_id="1", user_id=["2", "3"])

        assert GET_BANNED_USERS.build_uri(request) == (
            "https://api.twitch.tv/helix/moderation/banned?broadcaster_id=1&user_id=2&user_id=3"
        )

    def test_banned_events_all_fields(self):
        request = GET_BANNED_EVENTS.request(
            broadcaster_id="1", user_id=["2", "3"], after="abc", first=50
        )

        assert GET_BANNED_EVENTS.build_uri(request) == (
            "https://api.twitch.tv/helix/moderation/banned/events"
            "?broadcaster_id=1&user_id=2&user_id=3&after=abc&first=50"
        )

    def test_moderator_events_filter(self):
        request = GET_MODERATOR_EVENTS.request(broadcaster_id="1", user_id=["9"])

        assert GET_MODERATOR_EVENTS.build_uri(request).endswith(
            "moderators/events?broadcaster_id=1&user_id=9"
        )

    def test_moderators_cursor(self):
        request = GET_MODERATORS.request(broadcaster_id="1", after="abc")

        assert GET_MODERATORS.build_uri(request).endswith("?broadcaster_id=1&after=abc")

    def test_user_id_limit(self):
        with pytest.raises(ConstructionError, match="user_id"):
            GET_BANNED_USERS.request(
                broadcaster_id="1", user_id=[str(i) for i in range(101)]
            )

    @pytest.mark.parametrize("first", [0, 101])
    def test_first_range(self, first):
        with pytest.raises(ConstructionError, match="first"):
            GET_BANNED_EVENTS.request(broadcaster_id="1", first=first)

    def test_moderators_has_no_user_filter(self):
        with pytest.raises(ConstructionError, match="user_id"):
            GET_MODERATORS.request(broadcaster_id="1", user_id=["2"])


class TestSamplePayloads:
    """Decoding the documented sample payloads."""

    def test_moderators(self):
        response = GET_MODERATORS.decode_response(samples.MODERATORS)

        assert len(response) == 2
        assert response.data[0] == Moderator(user_id="424596340", user_name="quotrok")
        assert response.cursor == samples.MODERATORS_CURSOR
        assert response.state is PageState.HAS_CURSOR

    def test_moderator_events(self):
        response = GET_MODERATOR_EVENTS.decode_response(samples.MODERATOR_EVENTS)

        assert len(response) == 3
        assert all(isinstance(event, ModeratorEvent) for event in response)
        assert [event.event_type for event in response] == [
            "moderation.moderator.remove",
            "moderation.moderator.add",
            "moderation.moderator.remove",
        ]
        assert response.data[1].event_data["user_name"] == "glowillig"
        assert response.cursor == samples.MODERATORS_CURSOR

    def test_banned_users(self):
        response = GET_BANNED_USERS.decode_response(samples.BANNED_USERS)

        assert len(response) == 2
        assert response.data[0] == BannedUser(
            user_id="423374343",
            user_name="glowillig",
            expires_at="2019-03-15T02:00:28Z",
        )
        assert response.cursor == samples.MODERATORS_CURSOR

    def test_banned_events(self):
        response = GET_BANNED_EVENTS.decode_response(samples.BANNED_EVENTS)

        assert len(response) == 3
        assert all(isinstance(event, BannedEvent) for event in response)
        assert [event.id for event in response] == [
            "1IPFqAb0p0JncbPSTEPhx8JF1Sa",
            "1IPFsDv5cs4mxfJ1s2O9Q5flf4Y",
            "1IPFqmlu9W2q4mXXjULyM8zX0rb",
        ]
        assert [event.event_type for event in response] == [
            "moderation.user.ban",
            "moderation.user.unban",
            "moderation.user.ban",
        ]
        assert [event.expires_at for event in response] == [None, None, None]
        assert all(event.event_data["expires_at"] == "" for event in response)
        assert response.cursor == samples.BANNED_EVENTS_CURSOR

    def test_automod_status(self):
        response = CHECK_AUTOMOD_STATUS.decode_response(samples.AUTOMOD_STATUS)

        assert list(response) == [
            AutoModStatus(msg_id="123", is_permitted=True),
            AutoModStatus(msg_id="393", is_permitted=False),
        ]
        assert response.cursor is None
        assert response.state is PageState.EXHAUSTED

    @pytest.mark.parametrize(
        "endpoint, payload",
        [
            (GET_MODERATORS, samples.MODERATORS),
            (GET_MODERATOR_EVENTS, samples.MODERATOR_EVENTS),
            (GET_BANNED_USERS, samples.BANNED_USERS),
            (GET_BANNED_EVENTS, samples.BANNED_EVENTS),
            (CHECK_AUTOMOD_STATUS, samples.AUTOMOD_STATUS),
        ],
    )
    def test_record_count_and_cursor_match_payload(self, endpoint, payload):
        parsed = json.loads(payload)

        for policy in DecodePolicy:
            response = endpoint.decode_response(payload, policy)
            assert len(response.data) == len(parsed["data"])
            assert response.cursor == parsed.get("pagination", {}).get("cursor")


class TestBannedUserExpiry:
    """expires_at is empty for permanent bans."""

    def test_empty_string_means_permanent(self):
        payload = b'{"data": [{"user_id": "1", "user_name": "a", "expires_at": ""}]}'

        response = GET_BANNED_USERS.decode_response(payload)

        assert response.data[0].expires_at is None

    def test_missing_means_permanent(self):
        payload = b'{"data": [{"user_id": "1", "user_name": "a"}]}'

        response = GET_BANNED_USERS.decode_response(payload)

        assert response.data[0].expires_at is None

    @pytest.mark.parametrize("value", ["false", "0", "[]", "{}"])
    def test_wrong_type_is_a_decode_error(self, value):
        payload = '{"data": [{"user_id": "1", "user_name": "a", "expires_at": %s}]}' % value

        with pytest.raises(DecodeError) as exc_info:
            GET_BANNED_USERS.decode_response(payload)

        assert exc_info.value.reason == "type"
        assert exc_info.value.field == "expires_at"
        assert exc_info.value.index == 0

    def test_timeout_event_expiry(self):
        event = BannedEvent(
            id="1",
            event_type="moderation.user.ban",
            event_timestamp="2019-03-13T15:55:14Z",
            version="1.0",
            event_data={"expires_at": "2019-03-13T16:05:14Z"},
        )

        assert event.expires_at == "2019-03-13T16:05:14Z"


class TestAutoModBody:
    """Body construction for Check AutoMod Status."""

    def test_body(self):
        body = CHECK_AUTOMOD_STATUS.build_body([
            CheckAutoModStatusBody(
                msg_id="test1", msg_text="automod please approve this!", user_id="1234"
            ),
        ])

        assert body == (
            '{"data":[{"msg_id":"test1","msg_text":"automod please approve this!",'
            '"user_id":"1234"}]}'
        )

    def test_body_fields_are_mandatory(self):
        with pytest.raises(ConstructionError, match="msg_text"):
            CHECK_AUTOMOD_STATUS.build_body([{"msg_id": "1", "user_id": "2"}])
