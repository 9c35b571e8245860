# backend/app/routes/v1/students.py
"""
Student routes - API v1

Endpoints (mounted under /api/v1/students):
    GET /package - Current lesson package totals
    GET /packages - All packages of the caller
"""

import asyncio
import logging

from fastapi import APIRouter, Depends

from ...api.dependencies import get_current_student, get_package_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.lesson_package import (
    LessonPackageResponse,
    PackageListResponse,
    PackageSummary,
)
from ...services.package_service import PackageService
from .bookings import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["students-v1"])


@router.get("/package", response_model=PackageSummary)
async def get_package_summary(
    current_user: User = Depends(get_current_student),
    package_service: PackageService = Depends(get_package_service),
) -> PackageSummary:
    try:
        return await asyncio.to_thread(package_service.get_package_summary, current_user)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/packages", response_model=PackageListResponse)
async def list_packages(
    current_user: User = Depends(get_current_student),
    package_service: PackageService = Depends(get_package_service),
) -> PackageListResponse:
    try:
        packages = await asyncio.to_thread(package_service.list_packages, current_user)
        return PackageListResponse(
            packages=[LessonPackageResponse.model_validate(p) for p in packages]
        )
    except DomainException as e:
        handle_domain_exception(e)
