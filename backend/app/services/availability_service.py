# backend/app/services/availability_service.py
"""
Availability Service for the booking backend

Answers "is this teacher open at this instant?" against recurring weekly
windows, and manages the windows themselves.

Windows are declared in local wall-clock time of the operational timezone.
A candidate instant is converted to that timezone, reduced to its day of
week (0 = Sunday) and zero-padded "HH:MM", then matched half-open against
active windows. Only the class start is checked; a class starting inside a
window may run past its end.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    ForbiddenException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..core.timezone_utils import local_day_of_week, local_time_string
from ..models.availability import TeacherAvailability
from ..models.user import User
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.user_repository import UserRepository
from ..schemas.availability import AvailabilityCreate, AvailabilityUpdate
from .base import BaseService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    """Resolves teacher availability and manages weekly windows."""

    def __init__(
        self,
        db: Session,
        repository: Optional[AvailabilityRepository] = None,
        timezone_name: Optional[str] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_availability_repository(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.timezone_name = timezone_name or settings.operational_timezone

    @BaseService.measure_operation("is_teacher_available")
    def is_teacher_available(self, teacher_id: str, candidate: datetime) -> bool:
        """
        Check whether a class may start at ``candidate``.

        Returns:
            True when an active window covers the local day and time
        """
        day_of_week = local_day_of_week(candidate, self.timezone_name)
        time_of_day = local_time_string(candidate, self.timezone_name)

        try:
            window = self.repository.find_matching_window(teacher_id, day_of_week, time_of_day)
        except RepositoryException as e:
            raise ServiceException(f"Failed to resolve availability: {str(e)}")

        self.logger.debug(
            "Availability resolved",
            extra={
                "teacher_id": teacher_id,
                "day_of_week": day_of_week,
                "time_of_day": time_of_day,
                "available": window is not None,
            },
        )
        return window is not None

    @BaseService.measure_operation("list_availability")
    def list_availability(
        self, teacher_id: str, include_inactive: bool = False
    ) -> List[TeacherAvailability]:
        return self.repository.list_windows(teacher_id, include_inactive=include_inactive)

    @BaseService.measure_operation("create_availability")
    def create_availability(self, teacher: User, data: AvailabilityCreate) -> TeacherAvailability:
        """
        Add a weekly window.

        Teachers add windows to their own week. Admins manage any teacher's
        windows and must name the owner through ``data.teacher_id``.
        """
        owner_id = self._resolve_window_owner(teacher, data.teacher_id)

        with self.transaction():
            window = self.repository.create(
                teacher_id=owner_id,
                day_of_week=data.day_of_week,
                start_time=data.start_time,
                end_time=data.end_time,
                is_active=True,
            )

        self.log_operation(
            "create_availability",
            teacher_id=owner_id,
            created_by=teacher.id,
            availability_id=window.id,
            day_of_week=window.day_of_week,
        )
        return window

    @BaseService.measure_operation("update_availability")
    def update_availability(
        self, teacher: User, availability_id: str, data: AvailabilityUpdate
    ) -> TeacherAvailability:
        window = self._get_owned_window(teacher, availability_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        start_time = changes.get("start_time", window.start_time)
        end_time = changes.get("end_time", window.end_time)
        if start_time >= end_time:
            raise ValidationException(
                "End time must be after start time",
                code="INVALID_TIME_RANGE",
                details={"start_time": start_time, "end_time": end_time},
            )

        with self.transaction():
            for key, value in changes.items():
                setattr(window, key, value)
            self.repository.flush()

        self.log_operation(
            "update_availability", availability_id=window.id, fields=sorted(changes)
        )
        return window

    @BaseService.measure_operation("deactivate_availability")
    def deactivate_availability(self, teacher: User, availability_id: str) -> TeacherAvailability:
        """Soft-disable a window. Existing bookings are left untouched."""
        window = self._get_owned_window(teacher, availability_id)
        with self.transaction():
            window.is_active = False
            self.repository.flush()

        self.log_operation("deactivate_availability", availability_id=window.id)
        return window

    def _get_owned_window(self, teacher: User, availability_id: str) -> TeacherAvailability:
        window = self.repository.get_by_id(availability_id)
        # Admins may edit any window; teachers only their own
        if window is None or (not teacher.is_admin and window.teacher_id != teacher.id):
            raise NotFoundException("Availability not found", code="AVAILABILITY_NOT_FOUND")
        return window

    def _resolve_window_owner(self, user: User, teacher_id: Optional[str]) -> str:
        if user.is_teacher:
            if teacher_id is not None and teacher_id != user.id:
                raise ForbiddenException("Teachers can only manage their own availability")
            return user.id

        if not user.is_admin:
            raise ForbiddenException("Only teachers can manage availability")
        if teacher_id is None:
            raise ValidationException("teacher_id is required", code="TEACHER_ID_REQUIRED")
        try:
            owner = self.user_repository.get_teacher(teacher_id)
        except RepositoryException as e:
            raise ServiceException(f"Failed to load teacher: {str(e)}")
        if owner is None:
            raise NotFoundException("Teacher not found", code="TEACHER_NOT_FOUND")
        return owner.id
