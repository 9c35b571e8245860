# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from functools import lru_cache
import logging
from typing import Any, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...integrations import FakeGoogleCalendarClient, GoogleCalendarClient
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.calendar_service import CalendarSyncService
from ...services.package_service import PackageService
from ...services.reservation_service import ReservationService
from .database import get_db

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_calendar_client() -> Optional[Any]:
    """
    Process-wide calendar client chosen by ``settings.calendar_provider``.

    Returns None when Google is selected but no OAuth client is configured;
    bookings then proceed without calendar events.
    """
    if settings.calendar_provider == "fake":
        logger.info("Using fake Google Calendar client")
        return FakeGoogleCalendarClient()

    if not settings.google_credentials_configured:
        logger.warning("Google Calendar credentials missing; calendar sync disabled")
        return None

    return GoogleCalendarClient(
        client_id=settings.google_client_id or "",
        client_secret=settings.google_client_secret or "",
        base_url=settings.google_calendar_base_url,
        token_url=settings.google_token_url,
        timeout=settings.calendar_timeout_seconds,
    )


def get_calendar_sync_service(
    db: Session = Depends(get_db),
    client: Optional[Any] = Depends(get_calendar_client),
) -> CalendarSyncService:
    return CalendarSyncService(db, client=client)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    calendar_service: CalendarSyncService = Depends(get_calendar_sync_service),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        calendar_service: Calendar side effect used after each reservation

    Returns:
        BookingService instance
    """
    return BookingService(
        db,
        reservation_service=ReservationService(db, calendar_service=calendar_service),
    )


def get_package_service(db: Session = Depends(get_db)) -> PackageService:
    return PackageService(db)
