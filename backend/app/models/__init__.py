# backend/app/models/__init__.py
"""
SQLAlchemy models for the booking backend.

Importing this package registers every table on ``Base.metadata``.
"""

from .availability import TeacherAvailability
from .booking import Booking, BookingStatus, ClassSlot
from .lesson_package import LessonPackage
from .topic import Topic
from .user import ExternalAccount, User

__all__ = [
    "Booking",
    "BookingStatus",
    "ClassSlot",
    "ExternalAccount",
    "LessonPackage",
    "TeacherAvailability",
    "Topic",
    "User",
]
