# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import (
    get_current_active_user,
    get_current_student,
    get_current_teacher,
    get_current_user,
)
from .database import get_db
from .services import (
    get_availability_service,
    get_booking_service,
    get_calendar_client,
    get_calendar_sync_service,
    get_package_service,
)

__all__ = [
    # Auth
    "get_current_user",
    "get_current_active_user",
    "get_current_student",
    "get_current_teacher",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_booking_service",
    "get_calendar_client",
    "get_calendar_sync_service",
    "get_package_service",
]
