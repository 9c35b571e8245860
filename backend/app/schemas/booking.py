# backend/app/schemas/booking.py
"""
Booking schemas for the lesson booking backend.

A booking request names a teacher, a topic and the exact start instant of
the class. The instant must carry a timezone offset; it is normalized to
UTC before it reaches the admission rules.
"""

from datetime import date, datetime
import re
from typing import List, Optional

from pydantic import Field, field_validator

from ..core.timezone_utils import ensure_utc
from ..models.booking import BookingStatus
from ._strict_base import StrictModel, StrictRequestModel

# Calendar date and wall-clock time; numeric epoch strings do not match
_ISO_INSTANT_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}")


class BookingCreate(StrictRequestModel):
    """Request a seat in a teacher's class."""

    teacher_id: str = Field(..., min_length=1, description="Teacher to book")
    topic_id: str = Field(..., min_length=1, description="Topic of the class")
    scheduled_at: datetime = Field(
        ..., description="Class start as an ISO-8601 instant with offset"
    )

    @field_validator("scheduled_at", mode="before")
    @classmethod
    def require_iso_instant(cls, v: object) -> object:
        if isinstance(v, datetime):
            return v
        if isinstance(v, str) and _ISO_INSTANT_PREFIX.match(v):
            return v
        raise ValueError("scheduled_at must be an ISO-8601 date-time string")

    @field_validator("scheduled_at")
    @classmethod
    def require_aware_instant(cls, v: datetime) -> datetime:
        if v.tzinfo is None or v.utcoffset() is None:
            raise ValueError("scheduled_at must include a timezone offset")
        return ensure_utc(v)


class PersonSummary(StrictModel):
    id: str
    name: str
    email: str


class TopicSummary(StrictModel):
    id: str
    name: str
    level: Optional[str] = None


class BookingResponse(StrictModel):
    """Booking as returned to clients."""

    id: str
    student_id: str
    teacher_id: str
    topic_id: str
    scheduled_at: datetime
    status: BookingStatus
    calendar_event_id: Optional[str] = None
    meeting_link: Optional[str] = None
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    attended_at: Optional[datetime] = None
    student: Optional[PersonSummary] = None
    teacher: Optional[PersonSummary] = None
    topic: Optional[TopicSummary] = None

    @field_validator("scheduled_at", "created_at", "cancelled_at", "attended_at")
    @classmethod
    def as_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v) if v is not None else v


class BookingRejection(StrictModel):
    """Body of a 400 response for a request the admission rules turned down."""

    code: str
    message: str


class BookingListResponse(StrictModel):
    bookings: List[BookingResponse]
    total: int


class AvailableSlot(StrictModel):
    """One bookable start instant inside a teacher window."""

    teacher_id: str
    teacher_name: str
    scheduled_at: datetime
    local_date: date
    local_time: str
    booked_count: int
    capacity: int
    available: bool


class AvailableSlotsResponse(StrictModel):
    slots: List[AvailableSlot]
