from datetime import date, datetime, time, timedelta, timezone

from app.core.timezone_utils import (
    ensure_utc,
    local_day_of_week,
    local_time_string,
    local_to_utc,
    parse_time_of_day,
    to_local,
)


def test_ensure_utc_treats_naive_as_utc():
    naive = datetime(2025, 3, 3, 13, 0)
    assert ensure_utc(naive) == datetime(2025, 3, 3, 13, 0, tzinfo=timezone.utc)


def test_ensure_utc_converts_offsets():
    sao_paulo = timezone(timedelta(hours=-3))
    aware = datetime(2025, 3, 3, 10, 0, tzinfo=sao_paulo)
    assert ensure_utc(aware) == datetime(2025, 3, 3, 13, 0, tzinfo=timezone.utc)
    assert ensure_utc(aware).tzinfo == timezone.utc


def test_local_to_utc_uses_operational_timezone():
    # 2025-03-03 is a Monday; Sao Paulo is UTC-3 without DST
    instant = local_to_utc(date(2025, 3, 3), time(10, 0))
    assert instant == datetime(2025, 3, 3, 13, 0, tzinfo=timezone.utc)
    assert to_local(instant).hour == 10


def test_day_of_week_counts_from_sunday():
    sunday_noon = local_to_utc(date(2025, 3, 2), time(12, 0))
    monday_noon = local_to_utc(date(2025, 3, 3), time(12, 0))
    saturday_noon = local_to_utc(date(2025, 3, 8), time(12, 0))

    assert local_day_of_week(sunday_noon) == 0
    assert local_day_of_week(monday_noon) == 1
    assert local_day_of_week(saturday_noon) == 6


def test_day_of_week_follows_local_date_not_utc_date():
    # 23:30 Monday in Sao Paulo is already Tuesday in UTC
    late_monday = local_to_utc(date(2025, 3, 3), time(23, 30))
    assert late_monday.date() == date(2025, 3, 4)
    assert local_day_of_week(late_monday) == 1


def test_local_time_string_is_zero_padded():
    instant = local_to_utc(date(2025, 3, 3), time(9, 5))
    assert local_time_string(instant) == "09:05"


def test_parse_time_of_day():
    assert parse_time_of_day("09:30") == time(9, 30)
    assert parse_time_of_day("23:59") == time(23, 59)
