# backend/app/repositories/booking_repository.py
"""
Booking Repository for the booking backend

Implements all data access operations for booking management.

This repository handles:
- Booking inserts and lookups with eager-loaded relationships
- Occupancy counting per class (teacher + exact start instant)
- Per-class seat counters (ClassSlot) with conditional increments
- User-scoped booking listings

Occupancy always counts SCHEDULED and COMPLETED bookings; cancelled and
no-show bookings free their seat.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload
import ulid

from ..core.enums import RoleName
from ..core.exceptions import RepositoryException
from ..core.timezone_utils import ensure_utc
from ..models.booking import SEAT_HOLDING_STATUSES, Booking, BookingStatus, ClassSlot
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

_SEAT_HOLDING_VALUES = [s.value for s in SEAT_HOLDING_STATUSES]


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access and class seat accounting."""

    def __init__(self, db: Session):
        """Initialize with Booking model."""
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    @property
    def dialect_name(self) -> str:
        bind = self.db.get_bind()
        return bind.dialect.name if bind is not None else ""

    # Occupancy

    def count_bookings(self, teacher_id: str, scheduled_at: datetime) -> int:
        """
        Count seat-holding bookings for one class.

        Keyed on the exact start instant; bookings at other instants never
        count, even when the classes would overlap.
        """
        try:
            return (
                self.db.query(func.count(Booking.id))
                .filter(
                    Booking.teacher_id == teacher_id,
                    Booking.scheduled_at == ensure_utc(scheduled_at),
                    Booking.status.in_(_SEAT_HOLDING_VALUES),
                )
                .scalar()
                or 0
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings for teacher {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}")

    def count_by_slot(
        self, teacher_id: str, start: datetime, end: datetime
    ) -> Dict[datetime, int]:
        """
        Seat-holding booking counts per start instant in [start, end).

        Returns:
            Mapping of UTC start instant to occupied seats
        """
        try:
            rows = (
                self.db.query(Booking.scheduled_at, func.count(Booking.id))
                .filter(
                    Booking.teacher_id == teacher_id,
                    Booking.scheduled_at >= ensure_utc(start),
                    Booking.scheduled_at < ensure_utc(end),
                    Booking.status.in_(_SEAT_HOLDING_VALUES),
                )
                .group_by(Booking.scheduled_at)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting slots for teacher {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to count bookings by slot: {str(e)}")
        return {ensure_utc(scheduled_at): count for scheduled_at, count in rows}

    # Seat counters

    def reserve_seat(self, teacher_id: str, scheduled_at: datetime, capacity: int) -> bool:
        """
        Take one seat in a class if any is left.

        The counter row is created on first use, seeded from the live
        booking count. The increment itself is a single conditional UPDATE,
        so at most ``capacity`` concurrent callers can succeed.

        Returns:
            True when a seat was taken, False when the class is full
        """
        moment = ensure_utc(scheduled_at)
        self._ensure_slot_row(teacher_id, moment)
        try:
            result = self.db.execute(
                update(ClassSlot)
                .where(
                    ClassSlot.teacher_id == teacher_id,
                    ClassSlot.scheduled_at == moment,
                    ClassSlot.seats_taken < capacity,
                )
                .values(seats_taken=ClassSlot.seats_taken + 1)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error reserving seat for teacher {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to reserve seat: {str(e)}")

    def release_seat(self, teacher_id: str, scheduled_at: datetime) -> bool:
        """Give one seat back. Never drives the counter below zero."""
        try:
            result = self.db.execute(
                update(ClassSlot)
                .where(
                    ClassSlot.teacher_id == teacher_id,
                    ClassSlot.scheduled_at == ensure_utc(scheduled_at),
                    ClassSlot.seats_taken > 0,
                )
                .values(seats_taken=ClassSlot.seats_taken - 1)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1
        except SQLAlchemyError as e:
            self.logger.error(f"Error releasing seat for teacher {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to release seat: {str(e)}")

    def get_seats_taken(self, teacher_id: str, scheduled_at: datetime) -> Optional[int]:
        """Current counter value, or None when no counter row exists yet."""
        try:
            return (
                self.db.query(ClassSlot.seats_taken)
                .filter(
                    ClassSlot.teacher_id == teacher_id,
                    ClassSlot.scheduled_at == ensure_utc(scheduled_at),
                )
                .scalar()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading class slot: {str(e)}")
            raise RepositoryException(f"Failed to load class slot: {str(e)}")

    def _ensure_slot_row(self, teacher_id: str, moment: datetime) -> None:
        if self.get_seats_taken(teacher_id, moment) is not None:
            return

        values = {
            "id": str(ulid.ULID()),
            "teacher_id": teacher_id,
            "scheduled_at": moment,
            "seats_taken": self.count_bookings(teacher_id, moment),
        }
        dialect = self.dialect_name
        try:
            if dialect == "postgresql":
                self.db.execute(
                    pg_insert(ClassSlot)
                    .values(**values)
                    .on_conflict_do_nothing(index_elements=["teacher_id", "scheduled_at"])
                )
            elif dialect == "sqlite":
                self.db.execute(
                    sqlite_insert(ClassSlot)
                    .values(**values)
                    .on_conflict_do_nothing(index_elements=["teacher_id", "scheduled_at"])
                )
            else:
                try:
                    with self.db.begin_nested():
                        self.db.add(ClassSlot(**values))
                except IntegrityError:
                    # Another transaction created the counter first
                    self.logger.debug(
                        "Class slot row already exists",
                        extra={"teacher_id": teacher_id, "scheduled_at": moment.isoformat()},
                    )
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating class slot for teacher {teacher_id}: {str(e)}")
            raise RepositoryException(f"Failed to create class slot: {str(e)}")

    # Booking lookups

    def insert_booking(self, **fields: Any) -> Booking:
        """Insert a booking row (flushes, never commits)."""
        if "scheduled_at" in fields:
            fields["scheduled_at"] = ensure_utc(fields["scheduled_at"])
        return self.create(**fields)

    def get_with_details(self, booking_id: str) -> Optional[Booking]:
        """Booking with student, teacher and topic eager-loaded."""
        try:
            return (
                self.db.query(Booking)
                .options(
                    joinedload(Booking.student),
                    joinedload(Booking.teacher),
                    joinedload(Booking.topic),
                )
                .filter(Booking.id == booking_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to load booking: {str(e)}")

    def list_for_user(
        self,
        user: User,
        status: Optional[BookingStatus] = None,
        upcoming_after: Optional[datetime] = None,
    ) -> List[Booking]:
        """
        List bookings visible to a user.

        Students see their own bookings, teachers the bookings of their
        classes, admins everything. Ordered by start instant.
        """
        try:
            query = self.db.query(Booking).options(
                joinedload(Booking.student),
                joinedload(Booking.teacher),
                joinedload(Booking.topic),
            )
            if user.role == RoleName.STUDENT.value:
                query = query.filter(Booking.student_id == user.id)
            elif user.role == RoleName.TEACHER.value:
                query = query.filter(Booking.teacher_id == user.id)

            if status is not None:
                query = query.filter(Booking.status == status.value)
            if upcoming_after is not None:
                query = query.filter(Booking.scheduled_at >= ensure_utc(upcoming_after))

            query = query.order_by(Booking.scheduled_at.asc(), Booking.id.asc())
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing bookings for user {user.id}: {str(e)}")
            raise RepositoryException(f"Failed to list bookings: {str(e)}")
