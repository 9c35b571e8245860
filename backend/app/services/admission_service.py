# backend/app/services/admission_service.py
"""
Admission Service for the booking backend

Decides whether a booking request may proceed. Rules run in a fixed order
and the first failing rule decides the rejection:

1. Lead time: the class starts at least ``booking_min_lead_minutes`` from now
2. Credit: the student holds an active package (earliest expiry wins)
3. Capacity: fewer than ``class_capacity`` seat-holding bookings exist for
   the exact (teacher, start instant)
4. Availability: an active teacher window covers the start instant

Rejections are returned as values; nothing here raises for a rejected
request. The decision is advisory; the reservation step re-checks capacity
and credit atomically.
"""

from datetime import datetime, timedelta
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import RejectionReason
from ..core.exceptions import RepositoryException, ServiceException
from ..core.timezone_utils import ensure_utc, utc_now
from ..domain.booking_admission import AdmissionDecision
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.package_repository import PackageRepository
from .availability_service import AvailabilityService
from .base import BaseService

logger = logging.getLogger(__name__)


class AdmissionService(BaseService):
    """Runs the ordered admission rules for a booking request."""

    def __init__(
        self,
        db: Session,
        availability_service: Optional[AvailabilityService] = None,
        booking_repository: Optional[BookingRepository] = None,
        package_repository: Optional[PackageRepository] = None,
        min_lead_minutes: Optional[int] = None,
        capacity: Optional[int] = None,
    ):
        super().__init__(db)
        self.availability_service = availability_service or AvailabilityService(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.package_repository = (
            package_repository or RepositoryFactory.create_package_repository(db)
        )
        self.min_lead = timedelta(
            minutes=settings.booking_min_lead_minutes if min_lead_minutes is None else min_lead_minutes
        )
        self.capacity = settings.class_capacity if capacity is None else capacity

    @BaseService.measure_operation("evaluate_admission")
    def evaluate(
        self,
        student_id: str,
        teacher_id: str,
        topic_id: str,
        scheduled_at: datetime,
        now: Optional[datetime] = None,
    ) -> AdmissionDecision:
        """
        Evaluate a booking request.

        Args:
            student_id: Student asking for the seat
            teacher_id: Teacher running the class
            topic_id: Topic of the class (not used by any rule)
            scheduled_at: Class start instant
            now: Evaluation instant, defaults to the current time

        Returns:
            AdmissionDecision carrying the package to debit, or the rejection reason
        """
        decision = self._evaluate(student_id, teacher_id, ensure_utc(scheduled_at), now)
        prometheus_metrics.record_admission(decision.outcome)
        self.logger.info(
            f"Admission decision: {decision.outcome}",
            extra={
                "student_id": student_id,
                "teacher_id": teacher_id,
                "topic_id": topic_id,
                "scheduled_at": ensure_utc(scheduled_at).isoformat(),
                "outcome": decision.outcome,
            },
        )
        return decision

    def _evaluate(
        self,
        student_id: str,
        teacher_id: str,
        scheduled_at: datetime,
        now: Optional[datetime],
    ) -> AdmissionDecision:
        current = ensure_utc(now) if now is not None else utc_now()

        if scheduled_at < current + self.min_lead:
            return AdmissionDecision.reject(RejectionReason.INSUFFICIENT_LEAD_TIME)

        try:
            package = self.package_repository.find_active_package(student_id, current)
            if package is None:
                return AdmissionDecision.reject(RejectionReason.NO_AVAILABLE_CREDITS)

            if self.booking_repository.count_bookings(teacher_id, scheduled_at) >= self.capacity:
                return AdmissionDecision.reject(RejectionReason.CLASS_FULL)
        except RepositoryException as e:
            raise ServiceException(f"Failed to evaluate booking request: {str(e)}")

        if not self.availability_service.is_teacher_available(teacher_id, scheduled_at):
            return AdmissionDecision.reject(RejectionReason.TEACHER_UNAVAILABLE)

        return AdmissionDecision.accept(package)
