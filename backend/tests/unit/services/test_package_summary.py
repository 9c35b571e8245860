from datetime import datetime, timedelta, timezone

import pytest

from app.core.exceptions import ForbiddenException
from app.services.package_service import PackageService


@pytest.fixture
def service(db):
    return PackageService(db)


def test_summary_of_student_without_packages_is_zero(service, student):
    summary = service.get_package_summary(student)

    assert summary.package_id is None
    assert summary.total_lessons == 0
    assert summary.used_lessons == 0
    assert summary.remaining_lessons == 0
    assert summary.valid_until is None


def test_summary_reports_package_credits_would_come_from(service, student, make_package):
    now = datetime.now(timezone.utc)
    make_package(student, total=8, used=2, valid_until=now + timedelta(days=90))
    soonest = make_package(student, total=4, used=1, valid_until=now + timedelta(days=15))

    summary = service.get_package_summary(student)

    assert summary.package_id == soonest.id
    assert summary.total_lessons == 4
    assert summary.used_lessons == 1
    assert summary.remaining_lessons == 3


def test_summary_ignores_expired_and_exhausted_packages(service, student, make_package):
    now = datetime.now(timezone.utc)
    make_package(student, total=5, valid_until=now - timedelta(days=1))
    make_package(student, total=3, used=3)

    assert service.get_package_summary(student).package_id is None


def test_list_packages(service, student, make_package):
    make_package(student, total=3)
    make_package(student, total=5, used=5)

    packages = service.list_packages(student)
    assert sorted(p.total_lessons for p in packages) == [3, 5]


def test_teachers_have_no_packages(service, teacher):
    with pytest.raises(ForbiddenException):
        service.get_package_summary(teacher)
