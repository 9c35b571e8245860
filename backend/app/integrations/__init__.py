"""External service integrations for the booking backend."""

from .google_calendar_client import (
    CalendarEvent,
    CalendarEventRequest,
    FakeGoogleCalendarClient,
    GoogleCalendarClient,
    GoogleCalendarError,
)

__all__ = [
    "CalendarEvent",
    "CalendarEventRequest",
    "FakeGoogleCalendarClient",
    "GoogleCalendarClient",
    "GoogleCalendarError",
]
