# backend/app/repositories/package_repository.py
"""
Lesson Package Repository for the booking backend

Credit lookups and the atomic credit movements used by reservation and
cancellation. Decrements are conditional single-statement UPDATEs so two
concurrent reservations can never spend the same credit.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import ensure_utc
from ..models.lesson_package import LessonPackage
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PackageRepository(BaseRepository[LessonPackage]):
    """Repository for lesson packages (student credits)."""

    def __init__(self, db: Session):
        super().__init__(db, LessonPackage)
        self.logger = logging.getLogger(__name__)

    def find_active_package(self, student_id: str, now: datetime) -> Optional[LessonPackage]:
        """
        Find the package credits should be drawn from.

        Only packages with remaining credits and valid_until >= now qualify.
        The one expiring soonest wins so credits are spent before they lapse.
        """
        try:
            return (
                self.db.query(LessonPackage)
                .filter(
                    LessonPackage.student_id == student_id,
                    LessonPackage.remaining_lessons > 0,
                    LessonPackage.valid_until >= ensure_utc(now),
                )
                .order_by(LessonPackage.valid_until.asc(), LessonPackage.id.asc())
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding active package for {student_id}: {str(e)}")
            raise RepositoryException(f"Failed to find active package: {str(e)}")

    def decrement_package(self, package_id: str, now: datetime) -> bool:
        """
        Spend one credit from a package.

        Returns:
            True when a credit was spent, False when the package had no
            credit left or expired between lookup and update.
        """
        try:
            result = self.db.execute(
                update(LessonPackage)
                .where(
                    LessonPackage.id == package_id,
                    LessonPackage.remaining_lessons > 0,
                    LessonPackage.valid_until >= ensure_utc(now),
                )
                .values(
                    remaining_lessons=LessonPackage.remaining_lessons - 1,
                    used_lessons=LessonPackage.used_lessons + 1,
                )
                .execution_options(synchronize_session=False)
            )
            self._expire_cached(package_id)
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error decrementing package {package_id}: {str(e)}")
            raise RepositoryException(f"Failed to decrement package: {str(e)}")

    def refund_package(self, package_id: str) -> bool:
        """Return one credit to a package. No-op when nothing was used."""
        try:
            result = self.db.execute(
                update(LessonPackage)
                .where(LessonPackage.id == package_id, LessonPackage.used_lessons > 0)
                .values(
                    remaining_lessons=LessonPackage.remaining_lessons + 1,
                    used_lessons=LessonPackage.used_lessons - 1,
                )
                .execution_options(synchronize_session=False)
            )
            self._expire_cached(package_id)
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error refunding package {package_id}: {str(e)}")
            raise RepositoryException(f"Failed to refund package: {str(e)}")

    def list_for_student(self, student_id: str) -> List[LessonPackage]:
        """All packages of a student, soonest-expiring first."""
        try:
            return (
                self.db.query(LessonPackage)
                .filter(LessonPackage.student_id == student_id)
                .order_by(LessonPackage.valid_until.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing packages for {student_id}: {str(e)}")
            raise RepositoryException(f"Failed to list packages: {str(e)}")
