# backend/app/models/availability.py
"""
Availability model for teachers.

Each row is one recurring weekly window declared in local wall-clock time
(see Settings.operational_timezone). Windows are soft-disabled through
``is_active`` rather than deleted, so bookings made against a window keep
their implied validity.

Note: overlapping windows for the same teacher/day are not rejected.

Classes:
    TeacherAvailability: Recurring weekly open window
"""

import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.constants import DAYS_OF_WEEK
from ..database import Base

logger = logging.getLogger(__name__)


class TeacherAvailability(Base):
    """Recurring weekly availability window for a teacher."""

    __tablename__ = "teacher_availability"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    teacher_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)  # "HH:MM"
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    teacher = relationship("User", back_populates="availability_windows")

    # Zero-padded HH:MM strings order lexicographically like times
    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_day"),
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
        Index("idx_availability_teacher_day", "teacher_id", "day_of_week", "is_active"),
    )

    def __repr__(self) -> str:
        return (
            f"<TeacherAvailability {self.teacher_id} {self.day_name} "
            f"{self.start_time}-{self.end_time} active={self.is_active}>"
        )

    @property
    def day_name(self) -> str:
        return DAYS_OF_WEEK[self.day_of_week]

    def covers(self, time_of_day: str) -> bool:
        """Half-open containment: start <= t < end."""
        return bool(self.start_time <= time_of_day < self.end_time)
