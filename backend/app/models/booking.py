# backend/app/models/booking.py
"""
Booking models for the lesson booking backend.

A booking is one seat in a teacher's class at an exact start instant.
Bookings are never hard-deleted; they move from SCHEDULED into one of the
terminal states and stay there.

Bookings are validated against availability at creation time only. The
window they were made against is not stored, so later edits to
availability never invalidate existing bookings.

ClassSlot is a per (teacher, start instant) seat counter used to keep the
class capacity invariant under concurrent reservations.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    SCHEDULED = "SCHEDULED"  # Default - produced by reservation
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"  # Class took place, student attended
    NO_SHOW = "NO_SHOW"  # Student didn't attend


# Statuses that hold a seat in the class
SEAT_HOLDING_STATUSES = (BookingStatus.SCHEDULED, BookingStatus.COMPLETED)


class Booking(Base):
    """One scheduled (or resolved) class seat for a student."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    student_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    teacher_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    topic_id = Column(String(26), ForeignKey("topics.id"), nullable=False)
    lesson_package_id = Column(String(26), ForeignKey("lesson_packages.id"), nullable=True)

    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.SCHEDULED.value, index=True)

    # External calendar data (null when the sync was skipped or failed)
    calendar_event_id = Column(String(255), nullable=True)
    meeting_link = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    attended_at = Column(DateTime(timezone=True), nullable=True)

    student = relationship("User", foreign_keys=[student_id])
    teacher = relationship("User", foreign_keys=[teacher_id])
    topic = relationship("Topic")
    lesson_package = relationship("LessonPackage")

    __table_args__ = (
        CheckConstraint(
            "status IN ('SCHEDULED', 'CANCELLED', 'COMPLETED', 'NO_SHOW')",
            name="ck_bookings_status",
        ),
        Index("idx_bookings_teacher_scheduled_status", "teacher_id", "scheduled_at", "status"),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if not self.status:
            self.status = BookingStatus.SCHEDULED.value
        logger.info(
            f"Creating booking for student {self.student_id} with teacher {self.teacher_id}"
        )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: student={self.student_id}, teacher={self.teacher_id}, "
            f"at={self.scheduled_at}, status={self.status}>"
        )

    def cancel(self) -> None:
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} cancelled")

    def complete(self) -> None:
        self.status = BookingStatus.COMPLETED.value
        self.attended_at = datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} marked as completed")

    def mark_no_show(self) -> None:
        self.status = BookingStatus.NO_SHOW.value
        logger.info(f"Booking {self.id} marked as no-show")


class ClassSlot(Base):
    """Seat counter for one class (a teacher at an exact start instant)."""

    __tablename__ = "class_slots"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    teacher_id = Column(String(26), ForeignKey("users.id"), nullable=False)
    scheduled_at = Column(DateTime(timezone=True), nullable=False)
    seats_taken = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("teacher_id", "scheduled_at", name="uq_class_slots_teacher_time"),
        CheckConstraint("seats_taken >= 0", name="ck_class_slots_seats_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<ClassSlot {self.teacher_id} at={self.scheduled_at} seats={self.seats_taken}>"
