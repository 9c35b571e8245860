# backend/tests/repositories/test_availability_windows.py
import pytest

from app.repositories.availability_repository import AvailabilityRepository


@pytest.fixture
def repo(db):
    return AvailabilityRepository(db)


@pytest.mark.parametrize(
    "time_of_day,expected",
    [("08:59", False), ("09:00", True), ("10:30", True), ("11:59", True), ("12:00", False)],
)
def test_find_matching_window_is_half_open(repo, teacher, monday_window, time_of_day, expected):
    window = repo.find_matching_window(teacher.id, 1, time_of_day)
    assert (window is not None) is expected


def test_find_matching_window_skips_inactive(repo, teacher, make_window):
    make_window(teacher, is_active=False)
    assert repo.find_matching_window(teacher.id, 1, "10:00") is None


def test_list_windows_orders_by_day_then_start(repo, teacher, make_window):
    make_window(teacher, day_of_week=3, start_time="08:00", end_time="09:00")
    make_window(teacher, day_of_week=1, start_time="14:00", end_time="15:00")
    make_window(teacher, day_of_week=1, start_time="09:00", end_time="10:00")
    make_window(teacher, day_of_week=5, start_time="09:00", end_time="10:00", is_active=False)

    windows = repo.list_windows(teacher.id)
    assert [(w.day_of_week, w.start_time) for w in windows] == [(1, "09:00"), (1, "14:00"), (3, "08:00")]

    assert len(repo.list_windows(teacher.id, include_inactive=True)) == 4
    assert len(repo.list_windows(teacher.id, day_of_week=1)) == 2


def test_list_active_for_days(repo, teacher, make_window):
    make_window(teacher, day_of_week=0, start_time="08:00", end_time="09:00")
    make_window(teacher, day_of_week=2, start_time="08:00", end_time="09:00")

    assert [w.day_of_week for w in repo.list_active_for_days(teacher.id, [0, 1])] == [0]
    assert repo.list_active_for_days(teacher.id, []) == []
