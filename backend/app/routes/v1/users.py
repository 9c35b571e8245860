# backend/app/routes/v1/users.py
"""
User routes - API v1

Endpoints (mounted under /api/v1/users):
    GET /me - The caller's profile
    GET /me/calendar-status - Whether Google Calendar is linked
"""

import asyncio

from fastapi import APIRouter, Depends

from ...api.dependencies import get_calendar_sync_service, get_current_active_user
from ...core.constants import GOOGLE_PROVIDER
from ...models.user import User
from ...schemas.user import CalendarStatusResponse, UserResponse
from ...services.calendar_service import CalendarSyncService

router = APIRouter(tags=["users-v1"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.get("/me/calendar-status", response_model=CalendarStatusResponse)
async def get_calendar_status(
    current_user: User = Depends(get_current_active_user),
    calendar_service: CalendarSyncService = Depends(get_calendar_sync_service),
) -> CalendarStatusResponse:
    connected = await asyncio.to_thread(calendar_service.has_linked_account, current_user.id)
    return CalendarStatusResponse(provider=GOOGLE_PROVIDER, connected=connected)
