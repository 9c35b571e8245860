# backend/app/repositories/availability_repository.py
"""
Availability Repository for the booking backend

Data access for recurring weekly teacher windows. All time-of-day values
are zero-padded "HH:MM" strings, so half-open containment is evaluated
directly in SQL with string comparison.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import TeacherAvailability
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[TeacherAvailability]):
    """Repository for teacher availability windows."""

    def __init__(self, db: Session):
        super().__init__(db, TeacherAvailability)
        self.logger = logging.getLogger(__name__)

    def find_matching_window(
        self, teacher_id: str, day_of_week: int, time_of_day: str
    ) -> Optional[TeacherAvailability]:
        """
        Find an active window containing the given local day/time.

        Containment is half-open: start_time <= time_of_day < end_time.

        Args:
            teacher_id: The teacher ID
            day_of_week: 0 = Sunday ... 6 = Saturday
            time_of_day: Zero-padded "HH:MM"

        Returns:
            The first matching window, or None
        """
        try:
            return (
                self.db.query(TeacherAvailability)
                .filter(
                    TeacherAvailability.teacher_id == teacher_id,
                    TeacherAvailability.day_of_week == day_of_week,
                    TeacherAvailability.is_active.is_(True),
                    TeacherAvailability.start_time <= time_of_day,
                    TeacherAvailability.end_time > time_of_day,
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error matching availability window: {str(e)}")
            raise RepositoryException(f"Failed to match availability window: {str(e)}")

    def list_windows(
        self,
        teacher_id: str,
        day_of_week: Optional[int] = None,
        include_inactive: bool = False,
    ) -> List[TeacherAvailability]:
        """List a teacher's windows ordered by day then start time."""
        try:
            query = self.db.query(TeacherAvailability).filter(
                TeacherAvailability.teacher_id == teacher_id
            )
            if day_of_week is not None:
                query = query.filter(TeacherAvailability.day_of_week == day_of_week)
            if not include_inactive:
                query = query.filter(TeacherAvailability.is_active.is_(True))
            return query.order_by(
                TeacherAvailability.day_of_week, TeacherAvailability.start_time
            ).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing availability for teacher {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to list availability: {str(e)}")

    def list_active_for_days(
        self, teacher_id: str, days_of_week: List[int]
    ) -> List[TeacherAvailability]:
        """Active windows for a set of weekdays, used by slot listing."""
        if not days_of_week:
            return []
        try:
            return (
                self.db.query(TeacherAvailability)
                .filter(
                    TeacherAvailability.teacher_id == teacher_id,
                    TeacherAvailability.is_active.is_(True),
                    TeacherAvailability.day_of_week.in_(days_of_week),
                )
                .order_by(TeacherAvailability.day_of_week, TeacherAvailability.start_time)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading windows for teacher {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to load availability windows: {str(e)}")
