# backend/app/schemas/availability.py
"""
Availability window schemas.

Times are local wall-clock "HH:MM" strings (24h, zero-padded) in the
operational timezone.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from ..core.constants import TIME_OF_DAY_PATTERN
from ._strict_base import StrictModel, StrictRequestModel


class AvailabilityCreate(StrictRequestModel):
    teacher_id: Optional[str] = Field(None, description="Owner of the window; required when an admin creates it")
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN, examples=["09:00"])
    end_time: str = Field(..., pattern=TIME_OF_DAY_PATTERN, examples=["12:00"])

    @model_validator(mode="after")
    def check_order(self) -> "AvailabilityCreate":
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self


class AvailabilityUpdate(StrictRequestModel):
    """Partial edit; omitted fields keep their stored value."""

    day_of_week: Optional[int] = Field(None, ge=0, le=6)
    start_time: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_OF_DAY_PATTERN)
    is_active: Optional[bool] = None

    @model_validator(mode="after")
    def check_order(self) -> "AvailabilityUpdate":
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self


class AvailabilityResponse(StrictModel):
    id: str
    teacher_id: str
    day_of_week: int
    day_name: str
    start_time: str
    end_time: str
    is_active: bool
    created_at: Optional[datetime] = None


class AvailabilityListResponse(StrictModel):
    availability: List[AvailabilityResponse]
