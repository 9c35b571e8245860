"""Lesson package schemas."""

from datetime import datetime
from typing import List, Optional

from ._strict_base import StrictModel


class LessonPackageResponse(StrictModel):
    id: str
    student_id: str
    total_lessons: int
    used_lessons: int
    remaining_lessons: int
    valid_from: datetime
    valid_until: datetime


class PackageSummary(StrictModel):
    """Current package totals; all zeros when the student has none."""

    package_id: Optional[str] = None
    total_lessons: int = 0
    used_lessons: int = 0
    remaining_lessons: int = 0
    valid_until: Optional[datetime] = None


class PackageListResponse(StrictModel):
    packages: List[LessonPackageResponse]
