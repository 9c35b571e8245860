"""User-facing schemas."""

from typing import Optional

from ._strict_base import StrictModel


class UserResponse(StrictModel):
    id: str
    email: str
    name: str
    role: str
    level: Optional[str] = None


class CalendarStatusResponse(StrictModel):
    """Whether the caller has a linked Google account for calendar sync."""

    provider: str
    connected: bool
