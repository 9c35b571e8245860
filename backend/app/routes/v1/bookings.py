# backend/app/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    GET /available-slots - Bookable slot grid for a date range
    GET / - List bookings visible to the caller
    POST / - Book a seat in a class
    GET /{booking_id} - Booking details
    POST /{booking_id}/cancel - Cancel a booking
    POST /{booking_id}/complete - Mark booking as completed
    POST /{booking_id}/no-show - Mark booking as no-show
"""

import asyncio
from datetime import date
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.dependencies import get_booking_service, get_current_active_user
from ...core.exceptions import BookingRejectedException, DomainException
from ...models.booking import BookingStatus
from ...models.user import User
from ...schemas.booking import (
    AvailableSlotsResponse,
    BookingCreate,
    BookingListResponse,
    BookingRejection,
    BookingResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# Static routes (no path parameters)
# ============================================================================


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    start_date: date = Query(..., description="First local date (inclusive)"),
    end_date: date = Query(..., description="Last local date (inclusive)"),
    teacher_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> AvailableSlotsResponse:
    """Hourly slots inside active teacher windows, with occupancy."""
    try:
        slots = await asyncio.to_thread(
            booking_service.get_available_slots,
            start_date,
            end_date,
            teacher_id=teacher_id,
        )
        return AvailableSlotsResponse(slots=slots)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("", response_model=BookingListResponse)
async def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    upcoming: bool = Query(False, description="Only classes that have not started yet"),
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingListResponse:
    try:
        bookings = await asyncio.to_thread(
            booking_service.list_bookings,
            current_user,
            status=status_filter,
            upcoming=upcoming,
        )
        return BookingListResponse(
            bookings=[BookingResponse.model_validate(b) for b in bookings],
            total=len(bookings),
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": BookingRejection, "description": "Booking not admitted"}},
)
async def create_booking(
    booking_data: BookingCreate,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """
    Book a seat in a teacher's class.

    Requests that fail an admission rule get a 400 whose ``code`` names
    the rule: INSUFFICIENT_LEAD_TIME, NO_AVAILABLE_CREDITS, CLASS_FULL or
    TEACHER_UNAVAILABLE.
    """
    try:
        result = await asyncio.to_thread(
            booking_service.create_booking, current_user, booking_data
        )
        if result.rejection is not None:
            raise BookingRejectedException(result.rejection)
        return BookingResponse.model_validate(result.booking)
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# Routes with a booking id
# ============================================================================


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.get_booking_for_user, booking_id, current_user
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Cancel a scheduled booking. Students need 6 hours notice."""
    try:
        booking = await asyncio.to_thread(
            booking_service.cancel_booking, booking_id, current_user
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/complete", response_model=BookingResponse)
async def complete_booking(
    booking_id: str,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.complete_booking, booking_id, current_user
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/no-show", response_model=BookingResponse)
async def mark_booking_no_show(
    booking_id: str,
    current_user: User = Depends(get_current_active_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(booking_service.mark_no_show, booking_id, current_user)
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
