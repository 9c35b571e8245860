# backend/app/core/enums.py
"""
Core enums for the booking backend.

This module contains enumeration types used throughout the application
for type safety and consistency.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles a user can hold. Stored as plain strings on the users table."""

    ADMIN = "ADMIN"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"


class RejectionReason(str, Enum):
    """Why a booking request was not admitted."""

    INSUFFICIENT_LEAD_TIME = "INSUFFICIENT_LEAD_TIME"
    NO_AVAILABLE_CREDITS = "NO_AVAILABLE_CREDITS"
    CLASS_FULL = "CLASS_FULL"
    TEACHER_UNAVAILABLE = "TEACHER_UNAVAILABLE"

    @property
    def message(self) -> str:
        return REJECTION_MESSAGES[self]


REJECTION_MESSAGES = {
    RejectionReason.INSUFFICIENT_LEAD_TIME: "Bookings must be made at least 1 hour in advance",
    RejectionReason.NO_AVAILABLE_CREDITS: "No available credits or valid package",
    RejectionReason.CLASS_FULL: "This class is full",
    RejectionReason.TEACHER_UNAVAILABLE: "Teacher is not available at this time",
}
