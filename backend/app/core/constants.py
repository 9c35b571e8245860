"""Application-wide constants for the lesson booking backend."""

from __future__ import annotations

BRAND_NAME = "Lingua Booking"

# Booking admission defaults (overridable through Settings)
DEFAULT_MIN_LEAD_MINUTES = 60
DEFAULT_CLASS_CAPACITY = 10
DEFAULT_CLASS_DURATION_MINUTES = 60
DEFAULT_CANCELLATION_NOTICE_HOURS = 6
DEFAULT_OPERATIONAL_TIMEZONE = "America/Sao_Paulo"

# Availability windows use zero-padded 24h wall-clock strings
TIME_OF_DAY_PATTERN = r"^([01][0-9]|2[0-3]):[0-5][0-9]$"

# Day of week mapping (0 = Sunday, matching how windows are declared)
DAYS_OF_WEEK = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

# External calendar
GOOGLE_PROVIDER = "google"
CALENDAR_EVENT_TITLE = "English Class"
