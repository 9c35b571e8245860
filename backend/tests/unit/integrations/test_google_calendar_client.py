"""Tests for the Google Calendar client and its in-memory fake."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
from urllib.parse import parse_qs

import httpx
from pydantic import SecretStr
import pytest

from app.integrations.google_calendar_client import (
    CalendarEventRequest,
    FakeGoogleCalendarClient,
    GoogleCalendarClient,
    GoogleCalendarError,
    build_event_body,
    extract_meeting_link,
)

TOKEN_URL = "https://oauth.test/token"
BASE_URL = "https://calendar.test/v3"


def _event_request() -> CalendarEventRequest:
    start = datetime(2025, 3, 3, 10, 0, tzinfo=timezone(timedelta(hours=-3)))
    return CalendarEventRequest(
        summary="English Class - Business English",
        description="English Class\nTopic: Business English",
        start=start,
        end=start + timedelta(hours=1),
        attendee_emails=["student@example.com", "teacher@example.com"],
        timezone="America/Sao_Paulo",
    )


def _client(handler) -> GoogleCalendarClient:
    return GoogleCalendarClient(
        client_id="client-id",
        client_secret=SecretStr("client-secret"),
        base_url=BASE_URL,
        token_url=TOKEN_URL,
        timeout=2.0,
        transport=httpx.MockTransport(handler),
    )


class TestEventBody:
    def test_requests_meet_conference(self):
        body = build_event_body(_event_request())

        assert body["summary"] == "English Class - Business English"
        assert body["start"] == {
            "dateTime": "2025-03-03T10:00:00-03:00",
            "timeZone": "America/Sao_Paulo",
        }
        assert body["attendees"] == [
            {"email": "student@example.com"},
            {"email": "teacher@example.com"},
        ]
        create_request = body["conferenceData"]["createRequest"]
        assert create_request["conferenceSolutionKey"] == {"type": "hangoutsMeet"}
        assert create_request["requestId"].startswith("class-")

    def test_request_ids_are_unique(self):
        first = build_event_body(_event_request())["conferenceData"]["createRequest"]
        second = build_event_body(_event_request())["conferenceData"]["createRequest"]
        assert first["requestId"] != second["requestId"]


class TestMeetingLink:
    def test_first_entry_point(self):
        payload = {
            "conferenceData": {
                "entryPoints": [
                    {"entryPointType": "video", "uri": "https://meet.google.com/abc-defg-hij"},
                    {"entryPointType": "phone", "uri": "tel:+1-555-0100"},
                ]
            }
        }
        assert extract_meeting_link(payload) == "https://meet.google.com/abc-defg-hij"

    @pytest.mark.parametrize(
        "payload",
        [{}, {"conferenceData": {}}, {"conferenceData": {"entryPoints": []}}],
    )
    def test_missing_conference(self, payload):
        assert extract_meeting_link(payload) is None


class TestTokenRefresh:
    def test_posts_refresh_grant_form(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"access_token": "access-123", "expires_in": 3599})

        token = _client(handler).refresh_access_token("refresh-abc")

        assert token == "access-123"
        assert seen["url"] == TOKEN_URL
        assert seen["form"] == {
            "client_id": ["client-id"],
            "client_secret": ["client-secret"],
            "refresh_token": ["refresh-abc"],
            "grant_type": ["refresh_token"],
        }

    def test_invalid_grant_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"error": "invalid_grant", "error_description": "Token has been revoked."},
            )

        with pytest.raises(GoogleCalendarError) as exc_info:
            _client(handler).refresh_access_token("revoked")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Token has been revoked."

    def test_missing_access_token_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"token_type": "Bearer"})

        with pytest.raises(GoogleCalendarError):
            _client(handler).refresh_access_token("refresh-abc")


class TestCreateEvent:
    def test_refreshes_then_inserts_event(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if str(request.url) == TOKEN_URL:
                return httpx.Response(200, json={"access_token": "access-123"})
            return httpx.Response(
                200,
                json={
                    "id": "evt_42",
                    "conferenceData": {
                        "entryPoints": [{"uri": "https://meet.google.com/abc-defg-hij"}]
                    },
                },
            )

        event = _client(handler).create_event(refresh_token="refresh-abc", request=_event_request())

        assert event.event_id == "evt_42"
        assert event.meeting_link == "https://meet.google.com/abc-defg-hij"
        assert len(calls) == 2
        insert = calls[1]
        assert insert.method == "POST"
        assert insert.url.path == "/v3/calendars/primary/events"
        assert insert.url.params["conferenceDataVersion"] == "1"
        assert insert.headers["Authorization"] == "Bearer access-123"
        assert json.loads(insert.content)["summary"] == "English Class - Business English"

    def test_event_without_conference_has_no_link(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == TOKEN_URL:
                return httpx.Response(200, json={"access_token": "access-123"})
            return httpx.Response(200, json={"id": "evt_43"})

        event = _client(handler).create_event(refresh_token="refresh-abc", request=_event_request())

        assert event.event_id == "evt_43"
        assert event.meeting_link is None

    def test_calendar_error_payload(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == TOKEN_URL:
                return httpx.Response(200, json={"access_token": "access-123"})
            return httpx.Response(
                403, json={"error": {"code": 403, "message": "Rate Limit Exceeded"}}
            )

        with pytest.raises(GoogleCalendarError) as exc_info:
            _client(handler).create_event(refresh_token="refresh-abc", request=_event_request())

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Rate Limit Exceeded"

    def test_non_json_error_body(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        with pytest.raises(GoogleCalendarError) as exc_info:
            _client(handler).refresh_access_token("refresh-abc")

        assert exc_info.value.status_code == 502
        assert exc_info.value.details == {"raw": "Bad Gateway"}

    def test_timeout_becomes_calendar_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(GoogleCalendarError) as exc_info:
            _client(handler).create_event(refresh_token="refresh-abc", request=_event_request())

        assert exc_info.value.status_code is None
        assert "unreachable" in exc_info.value.message

    def test_connection_error_becomes_calendar_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GoogleCalendarError):
            _client(handler).refresh_access_token("refresh-abc")


class TestFakeClient:
    def test_records_calls_and_returns_meet_link(self):
        fake = FakeGoogleCalendarClient()

        event = fake.create_event(refresh_token="refresh-abc", request=_event_request())

        assert event.event_id.startswith("fake_event_")
        assert event.meeting_link.startswith("https://meet.google.com/fake-")
        assert [c["method"] for c in fake.calls] == ["create_event"]

    def test_injected_errors(self):
        fake = FakeGoogleCalendarClient()
        fake.set_error("create_event", GoogleCalendarError("boom", 500))

        with pytest.raises(GoogleCalendarError):
            fake.create_event(refresh_token="refresh-abc", request=_event_request())

        fake.clear_errors()
        assert fake.create_event(refresh_token="refresh-abc", request=_event_request()).event_id
