# backend/app/services/package_service.py
"""Lesson package queries for students."""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ForbiddenException
from ..core.timezone_utils import utc_now
from ..models.lesson_package import LessonPackage
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.package_repository import PackageRepository
from ..schemas.lesson_package import PackageSummary
from .base import BaseService

logger = logging.getLogger(__name__)


class PackageService(BaseService):
    def __init__(self, db: Session, repository: Optional[PackageRepository] = None):
        super().__init__(db)
        self.repository = repository or RepositoryFactory.create_package_repository(db)

    @BaseService.measure_operation("get_package_summary")
    def get_package_summary(self, student: User, now: Optional[datetime] = None) -> PackageSummary:
        """
        Totals of the package the next booking would draw from.

        Falls back to all zeros when the student has no active package.
        """
        self._require_student(student)
        package = self.repository.find_active_package(student.id, now or utc_now())
        if package is None:
            return PackageSummary()

        return PackageSummary(
            package_id=package.id,
            total_lessons=package.total_lessons,
            used_lessons=package.used_lessons,
            remaining_lessons=package.remaining_lessons,
            valid_until=package.valid_until,
        )

    @BaseService.measure_operation("list_packages")
    def list_packages(self, student: User) -> List[LessonPackage]:
        self._require_student(student)
        return self.repository.list_for_student(student.id)

    @staticmethod
    def _require_student(user: User) -> None:
        if not user.is_student:
            raise ForbiddenException("Only students have lesson packages", code="STUDENTS_ONLY")
