# backend/app/routes/v1/availability.py
"""
Teacher availability routes - API v1

Endpoints (mounted under /api/v1/teachers/availability):
    GET / - List active windows (own, or ?teacher_id= for any teacher)
    POST / - Add a window
    PATCH /{availability_id} - Edit a window
    DELETE /{availability_id} - Soft-disable a window
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies import (
    get_availability_service,
    get_current_active_user,
    get_current_teacher,
)
from ...core.exceptions import DomainException, ValidationException
from ...models.user import User
from ...schemas.availability import (
    AvailabilityCreate,
    AvailabilityListResponse,
    AvailabilityResponse,
    AvailabilityUpdate,
)
from ...services.availability_service import AvailabilityService
from .bookings import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


@router.get("", response_model=AvailabilityListResponse)
async def list_availability(
    teacher_id: Optional[str] = Query(None, description="Defaults to the calling teacher"),
    current_user: User = Depends(get_current_active_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityListResponse:
    try:
        target_id = teacher_id or (current_user.id if current_user.is_teacher else None)
        if target_id is None:
            raise ValidationException("teacher_id is required", code="TEACHER_ID_REQUIRED")
        windows = await asyncio.to_thread(availability_service.list_availability, target_id)
        return AvailabilityListResponse(
            availability=[AvailabilityResponse.model_validate(w) for w in windows]
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("", response_model=AvailabilityResponse, status_code=status.HTTP_201_CREATED)
async def create_availability(
    payload: AvailabilityCreate,
    current_user: User = Depends(get_current_teacher),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        window = await asyncio.to_thread(
            availability_service.create_availability, current_user, payload
        )
        return AvailabilityResponse.model_validate(window)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{availability_id}", response_model=AvailabilityResponse)
async def update_availability(
    availability_id: str,
    payload: AvailabilityUpdate,
    current_user: User = Depends(get_current_teacher),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        window = await asyncio.to_thread(
            availability_service.update_availability, current_user, availability_id, payload
        )
        return AvailabilityResponse.model_validate(window)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{availability_id}", response_model=AvailabilityResponse)
async def deactivate_availability(
    availability_id: str,
    current_user: User = Depends(get_current_teacher),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    """Windows are disabled, not deleted, so existing bookings keep their history."""
    try:
        window = await asyncio.to_thread(
            availability_service.deactivate_availability, current_user, availability_id
        )
        return AvailabilityResponse.model_validate(window)
    except DomainException as e:
        handle_domain_exception(e)
