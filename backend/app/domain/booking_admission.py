"""Value types passed between the admission and reservation steps."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from app.core.enums import RejectionReason

if TYPE_CHECKING:
    from app.models.booking import Booking
    from app.models.lesson_package import LessonPackage


@dataclass(frozen=True)
class BookingRequest:
    student_id: str
    teacher_id: str
    topic_id: str
    scheduled_at: datetime


@dataclass(frozen=True)
class AdmissionDecision:
    """
    Outcome of running the admission rules.

    Exactly one of ``package`` (accepted) or ``reason`` (rejected) is set.
    """

    package: Optional["LessonPackage"] = None
    reason: Optional[RejectionReason] = None

    @classmethod
    def accept(cls, package: "LessonPackage") -> "AdmissionDecision":
        return cls(package=package)

    @classmethod
    def reject(cls, reason: RejectionReason) -> "AdmissionDecision":
        return cls(reason=reason)

    @property
    def accepted(self) -> bool:
        return self.reason is None

    @property
    def outcome(self) -> str:
        return "ADMITTED" if self.reason is None else self.reason.value


@dataclass(frozen=True)
class ReservationResult:
    """What a booking attempt produced: a booking or a rejection reason."""

    booking: Optional["Booking"] = None
    rejection: Optional[RejectionReason] = None

    @classmethod
    def rejected(cls, reason: RejectionReason) -> "ReservationResult":
        return cls(rejection=reason)

    @property
    def succeeded(self) -> bool:
        return self.booking is not None
