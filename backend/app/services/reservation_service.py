# backend/app/services/reservation_service.py
"""
Reservation Service for the booking backend

Turns an admitted booking request into a stored booking.

One database transaction takes a seat on the class counter, spends one
credit from the admitted package and inserts the booking. Seat and credit
are both conditional updates, so a request that lost a race since admission
is rejected (CLASS_FULL / NO_AVAILABLE_CREDITS) and nothing is written.

The calendar event is created after the commit and never affects the
outcome. When it succeeds, the event id and meeting link are stored on the
booking in a second short write.
"""

from datetime import datetime
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import RejectionReason
from ..core.exceptions import RepositoryException, ServiceException
from ..core.timezone_utils import ensure_utc, utc_now
from ..domain.booking_admission import AdmissionDecision, BookingRequest, ReservationResult
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.package_repository import PackageRepository
from .base import BaseService
from .calendar_service import CalendarSyncService

logger = logging.getLogger(__name__)


class _ReservationLost(Exception):
    """Aborts the reservation transaction when a conditional update matched nothing."""

    def __init__(self, reason: RejectionReason):
        super().__init__(reason.value)
        self.reason = reason


class ReservationService(BaseService):
    """Commits admitted booking requests."""

    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        package_repository: Optional[PackageRepository] = None,
        calendar_service: Optional[CalendarSyncService] = None,
        capacity: Optional[int] = None,
    ):
        super().__init__(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.package_repository = (
            package_repository or RepositoryFactory.create_package_repository(db)
        )
        self.calendar_service = calendar_service or CalendarSyncService(db)
        self.capacity = settings.class_capacity if capacity is None else capacity

    @BaseService.measure_operation("commit_reservation")
    def commit(
        self,
        request: BookingRequest,
        decision: AdmissionDecision,
        now: Optional[datetime] = None,
    ) -> ReservationResult:
        """
        Reserve the seat, spend the credit and store the booking.

        Args:
            request: The admitted booking request
            decision: Admission decision; rejections are passed through untouched
            now: Instant used for the package expiry re-check

        Returns:
            ReservationResult with the booking, or the reason it was lost

        Raises:
            ServiceException: Storage failed; nothing was written
        """
        if not decision.accepted or decision.package is None:
            return ReservationResult.rejected(
                decision.reason or RejectionReason.NO_AVAILABLE_CREDITS
            )

        scheduled_at = ensure_utc(request.scheduled_at)
        current = ensure_utc(now) if now is not None else utc_now()
        package_id = decision.package.id

        try:
            if not self.booking_repository.reserve_seat(
                request.teacher_id, scheduled_at, self.capacity
            ):
                raise _ReservationLost(RejectionReason.CLASS_FULL)

            if not self.package_repository.decrement_package(package_id, current):
                raise _ReservationLost(RejectionReason.NO_AVAILABLE_CREDITS)

            booking = self.booking_repository.insert_booking(
                student_id=request.student_id,
                teacher_id=request.teacher_id,
                topic_id=request.topic_id,
                lesson_package_id=package_id,
                scheduled_at=scheduled_at,
            )
            self.db.commit()
        except _ReservationLost as lost:
            self.db.rollback()
            self.logger.info(
                f"Reservation lost after admission: {lost.reason.value}",
                extra={"teacher_id": request.teacher_id, "student_id": request.student_id},
            )
            prometheus_metrics.record_admission(f"LOST_{lost.reason.value}")
            return ReservationResult.rejected(lost.reason)
        except (RepositoryException, SQLAlchemyError) as e:
            self.db.rollback()
            self.logger.error(f"Reservation transaction failed: {str(e)}")
            raise ServiceException(f"Failed to store booking: {str(e)}")

        prometheus_metrics.inc_lesson_credit("debit")
        self.log_operation(
            "commit_reservation",
            booking_id=booking.id,
            teacher_id=booking.teacher_id,
            package_id=package_id,
        )

        self._attach_calendar_event(booking)
        return ReservationResult(booking=booking)

    def _attach_calendar_event(self, booking: Booking) -> None:
        """Create the calendar event and store its details. Failures are logged only."""
        booking_id = booking.id
        try:
            event = self.calendar_service.create_class_event(
                scheduled_at=booking.scheduled_at,
                topic=booking.topic,
                student=booking.student,
                teacher=booking.teacher,
            )
        except Exception as e:
            self.logger.error(f"Calendar sync failed for booking {booking_id}: {str(e)}")
            return

        if event is None:
            return

        try:
            booking.calendar_event_id = event.event_id
            booking.meeting_link = event.meeting_link
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.error(
                f"Failed to store calendar details for booking {booking_id}: {str(e)}",
                extra={"booking_id": booking_id, "calendar_event_id": event.event_id},
            )
            # Keep the returned booking consistent with what was stored
            booking.calendar_event_id = None
            booking.meeting_link = None
