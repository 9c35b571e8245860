# backend/tests/repositories/test_lesson_package_credits.py
from datetime import datetime, timedelta, timezone

import pytest

from app.models.lesson_package import LessonPackage
from app.repositories.package_repository import PackageRepository


@pytest.fixture
def repo(db):
    return PackageRepository(db)


def _balance(db, package_id):
    row = db.query(LessonPackage).filter(LessonPackage.id == package_id).one()
    return row.used_lessons, row.remaining_lessons


def test_decrement_moves_one_credit(db, repo, student, make_package):
    package = make_package(student, total=3)

    assert repo.decrement_package(package.id, datetime.now(timezone.utc)) is True
    db.commit()

    assert _balance(db, package.id) == (1, 2)


def test_decrement_refuses_empty_package(db, repo, student, make_package):
    package = make_package(student, total=2, used=2)

    assert repo.decrement_package(package.id, datetime.now(timezone.utc)) is False
    assert _balance(db, package.id) == (2, 0)


def test_decrement_refuses_expired_package(db, repo, student, make_package):
    now = datetime.now(timezone.utc)
    package = make_package(student, total=2, valid_until=now - timedelta(minutes=1))

    assert repo.decrement_package(package.id, now) is False
    assert _balance(db, package.id) == (0, 2)


def test_decrement_refreshes_loaded_instance(db, repo, student, make_package):
    package = make_package(student, total=2)

    repo.decrement_package(package.id, datetime.now(timezone.utc))

    assert package.remaining_lessons == 1


def test_refund_returns_credit(db, repo, student, make_package):
    package = make_package(student, total=2, used=1)

    assert repo.refund_package(package.id) is True
    db.commit()

    assert _balance(db, package.id) == (0, 2)


def test_refund_of_unused_package_is_noop(db, repo, student, make_package):
    package = make_package(student, total=2)

    assert repo.refund_package(package.id) is False
    assert _balance(db, package.id) == (0, 2)


def test_find_active_package_prefers_earliest_expiry(repo, student, make_package):
    now = datetime.now(timezone.utc)
    make_package(student, total=5, valid_until=now + timedelta(days=30))
    soonest = make_package(student, total=5, valid_until=now + timedelta(days=3))
    make_package(student, total=5, used=5, valid_until=now + timedelta(days=1))

    assert repo.find_active_package(student.id, now).id == soonest.id


def test_find_active_package_ignores_other_students(repo, student, make_user, make_package):
    other = make_user()
    make_package(other, total=5)

    assert repo.find_active_package(student.id, datetime.now(timezone.utc)) is None
