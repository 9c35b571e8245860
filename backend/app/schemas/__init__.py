# backend/app/schemas/__init__.py
"""
Pydantic schemas for the booking backend.

Request models forbid unknown fields; response models are built from ORM
objects (``from_attributes``).
"""

# Availability window schemas - recurring weekly windows
from .availability import (
    AvailabilityCreate,
    AvailabilityListResponse,
    AvailabilityResponse,
    AvailabilityUpdate,
)

# Booking schemas
from .booking import (
    AvailableSlot,
    AvailableSlotsResponse,
    BookingCreate,
    BookingListResponse,
    BookingRejection,
    BookingResponse,
    PersonSummary,
    TopicSummary,
)

# Lesson package schemas
from .lesson_package import LessonPackageResponse, PackageListResponse, PackageSummary

# User schemas
from .user import CalendarStatusResponse, UserResponse

__all__ = [
    # Availability
    "AvailabilityCreate",
    "AvailabilityUpdate",
    "AvailabilityResponse",
    "AvailabilityListResponse",
    # Bookings
    "BookingCreate",
    "BookingResponse",
    "BookingRejection",
    "BookingListResponse",
    "PersonSummary",
    "TopicSummary",
    "AvailableSlot",
    "AvailableSlotsResponse",
    # Packages
    "LessonPackageResponse",
    "PackageSummary",
    "PackageListResponse",
    # Users
    "UserResponse",
    "CalendarStatusResponse",
]
