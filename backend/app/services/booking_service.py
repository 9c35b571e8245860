# backend/app/services/booking_service.py
"""
Booking Service for the booking backend

Entry point for everything a user does with bookings:

- create_booking: validate references, run admission, commit reservation
- list / get with role-based visibility
- lifecycle transitions (cancel, complete, no-show) with seat and credit
  bookkeeping
- the bookable slot grid derived from teacher windows

Admission rejections come back as ReservationResult values. Only the HTTP
layer turns them into error responses.
"""

from datetime import date, datetime, time, timedelta
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import RoleName
from ..core.exceptions import (
    CancellationWindowException,
    ForbiddenException,
    InvalidStatusTransitionException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..core.timezone_utils import ensure_utc, local_to_utc, parse_time_of_day, utc_now
from ..domain.booking_admission import BookingRequest, ReservationResult
from ..models.availability import TeacherAvailability
from ..models.booking import Booking, BookingStatus
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.availability_repository import AvailabilityRepository
from ..repositories.booking_repository import BookingRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.package_repository import PackageRepository
from ..repositories.user_repository import TopicRepository, UserRepository
from ..schemas.booking import AvailableSlot, BookingCreate
from .admission_service import AdmissionService
from .base import BaseService
from .reservation_service import ReservationService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    """
    Service layer for booking operations.

    Collaborators are injected so tests can swap any of them; by default
    each is built on the same session.
    """

    def __init__(
        self,
        db: Session,
        admission_service: Optional[AdmissionService] = None,
        reservation_service: Optional[ReservationService] = None,
        booking_repository: Optional[BookingRepository] = None,
        package_repository: Optional[PackageRepository] = None,
        availability_repository: Optional[AvailabilityRepository] = None,
        user_repository: Optional[UserRepository] = None,
        topic_repository: Optional[TopicRepository] = None,
    ):
        super().__init__(db)
        self.repository = booking_repository or RepositoryFactory.create_booking_repository(db)
        self.package_repository = (
            package_repository or RepositoryFactory.create_package_repository(db)
        )
        self.availability_repository = (
            availability_repository or RepositoryFactory.create_availability_repository(db)
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.topic_repository = topic_repository or RepositoryFactory.create_topic_repository(db)
        self.admission_service = admission_service or AdmissionService(
            db,
            booking_repository=self.repository,
            package_repository=self.package_repository,
        )
        self.reservation_service = reservation_service or ReservationService(
            db,
            booking_repository=self.repository,
            package_repository=self.package_repository,
        )

    # Creation

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self, student: User, data: BookingCreate, now: Optional[datetime] = None
    ) -> ReservationResult:
        """
        Book a seat in a class for a student.

        Args:
            student: The calling student
            data: Teacher, topic and start instant
            now: Evaluation instant, defaults to the current time

        Returns:
            ReservationResult with the booking, or the rejection reason

        Raises:
            ForbiddenException: Caller is not a student
            NotFoundException: Teacher or topic does not exist
            ServiceException: Storage failed
        """
        if not student.is_student:
            raise ForbiddenException("Only students can book classes", code="STUDENTS_ONLY")

        if self.user_repository.get_teacher(data.teacher_id) is None:
            raise NotFoundException("Teacher not found", code="TEACHER_NOT_FOUND")
        if self.topic_repository.get_active(data.topic_id) is None:
            raise NotFoundException("Topic not found", code="TOPIC_NOT_FOUND")

        request = BookingRequest(
            student_id=student.id,
            teacher_id=data.teacher_id,
            topic_id=data.topic_id,
            scheduled_at=ensure_utc(data.scheduled_at),
        )

        decision = self.admission_service.evaluate(
            request.student_id,
            request.teacher_id,
            request.topic_id,
            request.scheduled_at,
            now=now,
        )
        if not decision.accepted:
            return ReservationResult.rejected(decision.reason)

        return self.reservation_service.commit(request, decision, now=now)

    # Queries

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        user: User,
        status: Optional[BookingStatus] = None,
        upcoming: bool = False,
        now: Optional[datetime] = None,
    ) -> List[Booking]:
        upcoming_after = (now or utc_now()) if upcoming else None
        return self.repository.list_for_user(user, status=status, upcoming_after=upcoming_after)

    @BaseService.measure_operation("get_booking")
    def get_booking_for_user(self, booking_id: str, user: User) -> Booking:
        """
        Load a booking the user is allowed to see.

        Raises:
            NotFoundException: No such booking
            ForbiddenException: Booking belongs to someone else
        """
        booking = self.repository.get_with_details(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")

        if user.role == RoleName.ADMIN.value:
            return booking
        if user.id in (booking.student_id, booking.teacher_id):
            return booking
        raise ForbiddenException("You do not have access to this booking")

    # Lifecycle

    @BaseService.measure_operation("cancel_booking")
    def cancel_booking(
        self, booking_id: str, user: User, now: Optional[datetime] = None
    ) -> Booking:
        """
        Cancel a scheduled booking and free its seat.

        Students must cancel at least ``cancellation_notice_hours`` before the
        class; the lesson then goes back to the package it was paid from.
        Teacher and admin cancellations always return the lesson.
        """
        booking = self.get_booking_for_user(booking_id, user)
        self._require_scheduled(booking, BookingStatus.CANCELLED)

        if user.is_student:
            current = ensure_utc(now) if now is not None else utc_now()
            hours_until = (ensure_utc(booking.scheduled_at) - current).total_seconds() / 3600
            if hours_until < settings.cancellation_notice_hours:
                raise CancellationWindowException(settings.cancellation_notice_hours, hours_until)

        refunded = False
        try:
            with self.transaction():
                booking.cancel()
                self.repository.release_seat(booking.teacher_id, booking.scheduled_at)
                if booking.lesson_package_id:
                    refunded = self.package_repository.refund_package(booking.lesson_package_id)
                self.repository.flush()
        except RepositoryException as e:
            raise ServiceException(f"Failed to cancel booking: {str(e)}")

        if refunded:
            prometheus_metrics.inc_lesson_credit("refund")
        self.log_operation(
            "cancel_booking",
            booking_id=booking.id,
            cancelled_by=user.id,
            refunded=refunded,
        )
        return booking

    @BaseService.measure_operation("complete_booking")
    def complete_booking(self, booking_id: str, user: User) -> Booking:
        """Mark a class as attended. The seat stays taken."""
        booking = self._get_for_teacher_action(booking_id, user)
        self._require_scheduled(booking, BookingStatus.COMPLETED)

        with self.transaction():
            booking.complete()
            self.repository.flush()

        self.log_operation("complete_booking", booking_id=booking.id, completed_by=user.id)
        return booking

    @BaseService.measure_operation("mark_no_show")
    def mark_no_show(self, booking_id: str, user: User) -> Booking:
        """Record that the student did not attend; the seat is released."""
        booking = self._get_for_teacher_action(booking_id, user)
        self._require_scheduled(booking, BookingStatus.NO_SHOW)

        try:
            with self.transaction():
                booking.mark_no_show()
                self.repository.release_seat(booking.teacher_id, booking.scheduled_at)
                self.repository.flush()
        except RepositoryException as e:
            raise ServiceException(f"Failed to mark no-show: {str(e)}")

        self.log_operation("mark_no_show", booking_id=booking.id, marked_by=user.id)
        return booking

    # Slot grid

    @BaseService.measure_operation("get_available_slots")
    def get_available_slots(
        self,
        start_date: date,
        end_date: date,
        teacher_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[AvailableSlot]:
        """
        List bookable start instants between two local dates (inclusive).

        Each active window yields one slot every ``slot_interval_minutes``
        from its start while the slot start is before the window end. Slots
        closer than the booking lead time are left out. A slot is available
        while its booked count is below capacity.
        """
        if end_date < start_date:
            raise ValidationException("end_date must not be before start_date")
        span_days = (end_date - start_date).days + 1
        if span_days > settings.max_slot_query_days:
            raise ValidationException(
                f"Date range cannot exceed {settings.max_slot_query_days} days",
                code="RANGE_TOO_LARGE",
                details={"days": span_days},
            )

        if teacher_id:
            teacher = self.user_repository.get_teacher(teacher_id)
            if teacher is None:
                raise NotFoundException("Teacher not found", code="TEACHER_NOT_FOUND")
            teachers = [teacher]
        else:
            teachers = self.user_repository.list_teachers()

        current = ensure_utc(now) if now is not None else utc_now()
        earliest = current + timedelta(minutes=settings.booking_min_lead_minutes)
        dates = [start_date + timedelta(days=offset) for offset in range(span_days)]
        days_of_week = sorted({(d.weekday() + 1) % 7 for d in dates})
        range_start = local_to_utc(start_date, time(0, 0))
        range_end = local_to_utc(end_date + timedelta(days=1), time(0, 0))

        slots: List[AvailableSlot] = []
        for teacher in teachers:
            windows = self.availability_repository.list_active_for_days(teacher.id, days_of_week)
            if not windows:
                continue
            booked = self.repository.count_by_slot(teacher.id, range_start, range_end)
            slots.extend(self._expand_windows(teacher, windows, dates, booked, earliest))

        slots.sort(key=lambda slot: (slot.scheduled_at, slot.teacher_name))
        return slots

    def _expand_windows(
        self,
        teacher: User,
        windows: List[TeacherAvailability],
        dates: List[date],
        booked: Dict[datetime, int],
        earliest: datetime,
    ) -> List[AvailableSlot]:
        interval = settings.slot_interval_minutes
        capacity = settings.class_capacity
        slots = []
        for day in dates:
            day_of_week = (day.weekday() + 1) % 7
            for window in windows:
                if window.day_of_week != day_of_week:
                    continue
                start = parse_time_of_day(window.start_time)
                end = parse_time_of_day(window.end_time)
                start_minutes = start.hour * 60 + start.minute
                end_minutes = end.hour * 60 + end.minute
                for minutes in range(start_minutes, end_minutes, interval):
                    wall_clock = time(minutes // 60, minutes % 60)
                    instant = local_to_utc(day, wall_clock)
                    if instant < earliest:
                        continue
                    count = booked.get(instant, 0)
                    slots.append(
                        AvailableSlot(
                            teacher_id=teacher.id,
                            teacher_name=teacher.name,
                            scheduled_at=instant,
                            local_date=day,
                            local_time=wall_clock.strftime("%H:%M"),
                            booked_count=count,
                            capacity=capacity,
                            available=count < capacity,
                        )
                    )
        return slots

    # Helpers

    def _get_for_teacher_action(self, booking_id: str, user: User) -> Booking:
        booking = self.get_booking_for_user(booking_id, user)
        if not (user.is_admin or user.id == booking.teacher_id):
            raise ForbiddenException("Only the teacher of this class can do that")
        return booking

    @staticmethod
    def _require_scheduled(booking: Booking, target: BookingStatus) -> None:
        if booking.status != BookingStatus.SCHEDULED.value:
            raise InvalidStatusTransitionException(booking.status, target.value)
