"""Google Calendar Integration Client.

Exchanges a stored OAuth refresh token for an access token and creates
calendar events with a Google Meet conference attached. Every call is
bounded by the configured timeout; callers treat any failure as
non-fatal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Any, cast
import uuid

import httpx
from pydantic import SecretStr

logger = logging.getLogger(__name__)


class GoogleCalendarError(RuntimeError):
    """Raised when Google OAuth or Calendar responds with an error."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        details: Any | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


@dataclass(frozen=True)
class CalendarEventRequest:
    """Everything needed to put one class on the teacher's calendar."""

    summary: str
    description: str
    start: datetime
    end: datetime
    attendee_emails: list[str] = field(default_factory=list)
    timezone: str = "America/Sao_Paulo"


@dataclass(frozen=True)
class CalendarEvent:
    event_id: str
    meeting_link: str | None = None


def build_event_body(request: CalendarEventRequest) -> dict[str, Any]:
    """Google Calendar event payload requesting a Meet conference."""
    return {
        "summary": request.summary,
        "description": request.description,
        "start": {"dateTime": request.start.isoformat(), "timeZone": request.timezone},
        "end": {"dateTime": request.end.isoformat(), "timeZone": request.timezone},
        "attendees": [{"email": email} for email in request.attendee_emails],
        "conferenceData": {
            "createRequest": {
                "requestId": f"class-{uuid.uuid4().hex}",
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        },
    }


def extract_meeting_link(payload: dict[str, Any]) -> str | None:
    """First conference entry point URI, if Google attached one."""
    entry_points = (payload.get("conferenceData") or {}).get("entryPoints") or []
    if not entry_points:
        return None
    uri = entry_points[0].get("uri")
    return uri if isinstance(uri, str) and uri else None


class GoogleCalendarClient:
    """HTTP client for the Google OAuth token endpoint and Calendar API."""

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str | SecretStr,
        base_url: str = "https://www.googleapis.com/calendar/v3",
        token_url: str = "https://oauth2.googleapis.com/token",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = (
            client_secret.get_secret_value()
            if isinstance(client_secret, SecretStr)
            else client_secret
        )
        self._base_url = base_url.rstrip("/")
        self._token_url = token_url
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self._timeout, transport=self._transport)

    def _send(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            with self._client() as client:
                response = client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.error("Google API unreachable for %s %s: %s", method, url, exc)
            raise GoogleCalendarError(
                message=f"Google API unreachable: {exc}",
                status_code=None,
            ) from exc

        if response.status_code >= 400:
            try:
                parsed_body = response.json()
            except ValueError:
                parsed_body = None
            error_body = parsed_body if isinstance(parsed_body, dict) else {}
            error = error_body.get("error")
            if isinstance(error, dict):
                message = error.get("message") or response.text
            else:
                message = error_body.get("error_description") or error or response.text

            logger.error(
                "Google API error %s for %s %s: %s",
                response.status_code,
                method,
                url,
                response.text[:500],
            )
            raise GoogleCalendarError(
                message=str(message),
                status_code=response.status_code,
                details=error_body or {"raw": response.text[:500]},
            )

        return cast(dict[str, Any], response.json())

    def refresh_access_token(self, refresh_token: str) -> str:
        """Trade a long-lived refresh token for a short-lived access token."""
        payload = self._send(
            "POST",
            self._token_url,
            data={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
        access_token = payload.get("access_token")
        if not access_token:
            raise GoogleCalendarError("Token response did not include an access token")
        return str(access_token)

    def create_event(self, *, refresh_token: str, request: CalendarEventRequest) -> CalendarEvent:
        """Create an event on the primary calendar and return its id and Meet link."""
        access_token = self.refresh_access_token(refresh_token)
        payload = self._send(
            "POST",
            f"{self._base_url}/calendars/primary/events",
            params={"conferenceDataVersion": 1},
            headers={"Authorization": f"Bearer {access_token}"},
            json=build_event_body(request),
        )
        event_id = payload.get("id")
        if not event_id:
            raise GoogleCalendarError("Calendar response did not include an event id")
        return CalendarEvent(event_id=str(event_id), meeting_link=extract_meeting_link(payload))


class FakeGoogleCalendarClient:
    """In-memory stub for testing/non-production environments."""

    def __init__(self, **kwargs: Any) -> None:
        self._calls: list[dict[str, Any]] = []
        self._errors: dict[str, Exception] = {}

    @property
    def calls(self) -> list[dict[str, Any]]:
        return list(self._calls)

    def set_error(self, method: str, error: Exception) -> None:
        """Inject a method-specific error for deterministic failure testing."""
        self._errors[method] = error

    def clear_errors(self) -> None:
        self._errors.clear()

    def _raise_if_injected(self, method: str) -> None:
        error = self._errors.get(method)
        if error is not None:
            raise error

    def refresh_access_token(self, refresh_token: str) -> str:
        self._calls.append({"method": "refresh_access_token"})
        self._raise_if_injected("refresh_access_token")
        return f"fake_access_token_{uuid.uuid4().hex[:8]}"

    def create_event(self, *, refresh_token: str, request: CalendarEventRequest) -> CalendarEvent:
        self._calls.append({"method": "create_event", "request": request})
        self._raise_if_injected("create_event")
        event_id = f"fake_event_{uuid.uuid4().hex[:12]}"
        return CalendarEvent(
            event_id=event_id,
            meeting_link=f"https://meet.google.com/fake-{event_id[-12:]}",
        )
