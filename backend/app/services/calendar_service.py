# backend/app/services/calendar_service.py
"""
Calendar Sync Service for the booking backend

Puts a booked class on the teacher's Google Calendar with a Meet link.
This is a best-effort side effect of a booking: a teacher without a linked
Google account is skipped quietly, and every provider failure is logged and
reported as "no event". Nothing in here is allowed to fail a booking.
"""

from datetime import datetime, timedelta
import logging
import time
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import CALENDAR_EVENT_TITLE, GOOGLE_PROVIDER
from ..core.timezone_utils import to_local
from ..integrations.google_calendar_client import CalendarEvent, CalendarEventRequest
from ..models.topic import Topic
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def build_event_description(topic: Topic, student: User, teacher: User) -> str:
    lines: List[str] = [
        CALENDAR_EVENT_TITLE,
        f"Topic: {topic.name}",
        f"Level: {student.level or topic.level or 'N/A'}",
        f"Student: {student.name}",
        f"Teacher: {teacher.name}",
    ]
    if topic.description:
        lines.extend(["", topic.description])
    return "\n".join(lines)


class CalendarSyncService(BaseService):
    """Creates calendar events for booked classes through a calendar client."""

    def __init__(
        self,
        db: Session,
        client: Optional[Any] = None,
        user_repository: Optional[UserRepository] = None,
        class_duration_minutes: Optional[int] = None,
        event_timezone: Optional[str] = None,
    ):
        super().__init__(db)
        self.client = client
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.class_duration = timedelta(
            minutes=class_duration_minutes or settings.default_class_duration_minutes
        )
        self.event_timezone = event_timezone or settings.calendar_event_timezone

    def has_linked_account(self, user_id: str) -> bool:
        """True when the user has a Google account with a refresh token."""
        return self.user_repository.get_refresh_token(user_id, GOOGLE_PROVIDER) is not None

    @BaseService.measure_operation("create_class_event")
    def create_class_event(
        self,
        *,
        scheduled_at: datetime,
        topic: Topic,
        student: User,
        teacher: User,
    ) -> Optional[CalendarEvent]:
        """
        Create the teacher's calendar event for a class.

        Returns:
            The created event, or None when skipped or failed
        """
        if self.client is None:
            prometheus_metrics.record_calendar_sync("skipped")
            return None

        try:
            refresh_token = self.user_repository.get_refresh_token(teacher.id, GOOGLE_PROVIDER)
        except Exception as e:
            self.logger.warning(f"Could not load calendar credentials for {teacher.id}: {str(e)}")
            prometheus_metrics.record_calendar_sync("failed")
            return None

        if refresh_token is None:
            self.logger.debug(
                "Teacher has no linked Google account; skipping calendar event",
                extra={"teacher_id": teacher.id},
            )
            prometheus_metrics.record_calendar_sync("skipped")
            return None

        start = to_local(scheduled_at, self.event_timezone)
        request = CalendarEventRequest(
            summary=f"{CALENDAR_EVENT_TITLE} - {topic.name}",
            description=build_event_description(topic, student, teacher),
            start=start,
            end=start + self.class_duration,
            attendee_emails=[student.email, teacher.email],
            timezone=self.event_timezone,
        )

        started = time.monotonic()
        try:
            event = self.client.create_event(refresh_token=refresh_token, request=request)
        except Exception as e:
            self.logger.error(
                f"Failed to create calendar event: {str(e)}",
                extra={"teacher_id": teacher.id, "scheduled_at": scheduled_at.isoformat()},
            )
            prometheus_metrics.record_calendar_sync("failed", time.monotonic() - started)
            return None

        prometheus_metrics.record_calendar_sync("created", time.monotonic() - started)
        self.log_operation(
            "create_class_event", teacher_id=teacher.id, calendar_event_id=event.event_id
        )
        return event
