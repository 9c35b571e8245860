"""
Tests for ReservationService.

Covers the atomic seat + credit + insert step, the races it has to lose
cleanly, and isolation of the calendar side effect.
"""

from datetime import time
from unittest.mock import Mock

import pytest

from app.core.enums import RejectionReason, RoleName
from app.core.exceptions import RepositoryException, ServiceException
from app.core.timezone_utils import local_to_utc
from app.domain.booking_admission import AdmissionDecision, BookingRequest
from app.integrations.google_calendar_client import GoogleCalendarError
from app.models.booking import Booking, ClassSlot
from app.models.lesson_package import LessonPackage
from app.repositories.booking_repository import BookingRepository
from app.repositories.package_repository import PackageRepository
from app.services.calendar_service import CalendarSyncService
from app.services.reservation_service import ReservationService


@pytest.fixture
def class_start(next_monday):
    return local_to_utc(next_monday, time(10, 0))


@pytest.fixture
def request_for(student, teacher, topic, class_start):
    return BookingRequest(
        student_id=student.id,
        teacher_id=teacher.id,
        topic_id=topic.id,
        scheduled_at=class_start,
    )


@pytest.fixture
def calendar_service(db, fake_calendar):
    return CalendarSyncService(db, client=fake_calendar)


@pytest.fixture
def service(db, calendar_service):
    return ReservationService(db, calendar_service=calendar_service)


def booking_count(db):
    return db.query(Booking).count()


def reload_package(db, package_id):
    return db.query(LessonPackage).filter(LessonPackage.id == package_id).one()


class TestCommit:
    def test_stores_booking_and_spends_credit(self, db, service, request_for, package):
        result = service.commit(request_for, AdmissionDecision.accept(package))

        assert result.succeeded
        assert result.rejection is None
        booking = result.booking
        assert booking.status == "SCHEDULED"
        assert booking.lesson_package_id == package.id

        stored = reload_package(db, package.id)
        assert stored.remaining_lessons == 0
        assert stored.used_lessons == 1
        assert stored.used_lessons + stored.remaining_lessons == stored.total_lessons

    def test_takes_one_seat_on_the_class_counter(
        self, db, service, request_for, package, teacher, class_start
    ):
        service.commit(request_for, AdmissionDecision.accept(package))

        seats = BookingRepository(db).get_seats_taken(teacher.id, class_start)
        assert seats == 1

    def test_rejected_decision_is_passed_through(self, db, service, request_for):
        result = service.commit(
            request_for, AdmissionDecision.reject(RejectionReason.TEACHER_UNAVAILABLE)
        )

        assert not result.succeeded
        assert result.rejection == RejectionReason.TEACHER_UNAVAILABLE
        assert booking_count(db) == 0


class TestLostRaces:
    def test_full_counter_rejects_with_class_full(
        self, db, service, request_for, package, teacher, class_start
    ):
        db.add(ClassSlot(teacher_id=teacher.id, scheduled_at=class_start, seats_taken=10))
        db.commit()

        result = service.commit(request_for, AdmissionDecision.accept(package))

        assert result.rejection == RejectionReason.CLASS_FULL
        assert booking_count(db) == 0
        assert reload_package(db, package.id).remaining_lessons == 1

    def test_drained_package_rejects_with_no_credits(
        self, db, service, request_for, package, teacher, class_start
    ):
        decision = AdmissionDecision.accept(package)
        # Another reservation spends the last credit after admission
        assert PackageRepository(db).decrement_package(package.id, class_start)
        db.commit()

        result = service.commit(request_for, decision)

        assert result.rejection == RejectionReason.NO_AVAILABLE_CREDITS
        assert booking_count(db) == 0
        # The seat taken inside the failed transaction was rolled back too
        assert BookingRepository(db).get_seats_taken(teacher.id, class_start) in (None, 0)
        stored = reload_package(db, package.id)
        assert stored.remaining_lessons == 0
        assert stored.used_lessons == 1

    def test_second_commit_with_same_single_credit_loses(
        self, db, service, student, teacher, topic, package, class_start
    ):
        first = BookingRequest(student.id, teacher.id, topic.id, class_start)
        decision = AdmissionDecision.accept(package)

        assert service.commit(first, decision).succeeded
        second = service.commit(first, decision)

        assert second.rejection == RejectionReason.NO_AVAILABLE_CREDITS
        assert booking_count(db) == 1
        assert BookingRepository(db).get_seats_taken(teacher.id, class_start) == 1

    def test_capacity_holds_across_many_commits(
        self, db, fake_calendar, make_user, make_package, teacher, topic, class_start
    ):
        service = ReservationService(
            db, calendar_service=CalendarSyncService(db, client=fake_calendar), capacity=3
        )
        outcomes = []
        for _ in range(5):
            learner = make_user(RoleName.STUDENT)
            pkg = make_package(learner, total=1)
            request = BookingRequest(learner.id, teacher.id, topic.id, class_start)
            outcomes.append(service.commit(request, AdmissionDecision.accept(pkg)))

        assert [o.succeeded for o in outcomes] == [True, True, True, False, False]
        assert all(o.rejection == RejectionReason.CLASS_FULL for o in outcomes[3:])
        assert booking_count(db) == 3

    def test_storage_failure_raises_and_writes_nothing(self, db, request_for, package):
        bookings = BookingRepository(db)
        bookings.insert_booking = Mock(side_effect=RepositoryException("insert failed"))
        service = ReservationService(
            db, booking_repository=bookings, calendar_service=Mock(spec=CalendarSyncService)
        )

        with pytest.raises(ServiceException):
            service.commit(request_for, AdmissionDecision.accept(package))

        assert booking_count(db) == 0
        assert reload_package(db, package.id).remaining_lessons == 1


class TestCalendarSideEffect:
    def test_linked_teacher_gets_event_and_meet_link(
        self, db, service, fake_calendar, request_for, package, linked_teacher
    ):
        result = service.commit(request_for, AdmissionDecision.accept(package))

        booking = result.booking
        assert booking.calendar_event_id.startswith("fake_event_")
        assert booking.meeting_link.startswith("https://meet.google.com/")

        stored = db.query(Booking).filter(Booking.id == booking.id).one()
        assert stored.calendar_event_id == booking.calendar_event_id
        assert [c["method"] for c in fake_calendar.calls] == ["create_event"]

    def test_event_request_describes_the_class(
        self, service, fake_calendar, request_for, package, linked_teacher, student, topic
    ):
        service.commit(request_for, AdmissionDecision.accept(package))

        event_request = fake_calendar.calls[0]["request"]
        assert event_request.summary == f"English Class - {topic.name}"
        assert event_request.attendee_emails == [student.email, linked_teacher.email]
        assert (event_request.end - event_request.start).total_seconds() == 3600
        assert event_request.start.hour == 10

    def test_teacher_without_linked_account_is_skipped(
        self, service, fake_calendar, request_for, package
    ):
        result = service.commit(request_for, AdmissionDecision.accept(package))

        assert result.succeeded
        assert result.booking.calendar_event_id is None
        assert result.booking.meeting_link is None
        assert fake_calendar.calls == []

    def test_provider_error_keeps_booking(
        self, db, service, fake_calendar, request_for, package, linked_teacher
    ):
        fake_calendar.set_error("create_event", GoogleCalendarError("quota exceeded", 403))

        result = service.commit(request_for, AdmissionDecision.accept(package))

        assert result.succeeded
        assert result.booking.calendar_event_id is None
        assert result.booking.meeting_link is None
        assert booking_count(db) == 1
        assert reload_package(db, package.id).remaining_lessons == 0

    def test_unexpected_calendar_exception_keeps_booking(
        self, db, request_for, package, linked_teacher
    ):
        calendar = Mock(spec=CalendarSyncService)
        calendar.create_class_event.side_effect = RuntimeError("boom")
        service = ReservationService(db, calendar_service=calendar)

        result = service.commit(request_for, AdmissionDecision.accept(package))

        assert result.succeeded
        assert result.booking.calendar_event_id is None
        assert booking_count(db) == 1
