# backend/tests/conftest.py
"""
Pytest configuration for the booking backend.

Every test gets its own in-memory SQLite database (StaticPool, so all
sessions share one connection). Route tests run against the real FastAPI
app with the session and the calendar client swapped through dependency
overrides.
"""

import os
import sys

# Set testing mode BEFORE any app imports
os.environ["IS_TESTING"] = "true"
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CALENDAR_PROVIDER"] = "fake"
os.environ["OPERATIONAL_TIMEZONE"] = "America/Sao_Paulo"

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Dict

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.dependencies.database import get_db
from app.api.dependencies.services import get_calendar_client
from app.auth import create_access_token
from app.core.enums import RoleName
from app.core.timezone_utils import local_to_utc
from app.database import Base
from app.integrations.google_calendar_client import FakeGoogleCalendarClient
from app.main import app
from app.models.availability import TeacherAvailability
from app.models.lesson_package import LessonPackage
from app.models.topic import Topic
from app.models.user import ExternalAccount, User

MONDAY = 1


def next_local_weekday(day_of_week: int, min_days_ahead: int = 2) -> date:
    """Next local date falling on ``day_of_week`` (0 = Sunday), at least N days out."""
    candidate = datetime.now(timezone.utc).date() + timedelta(days=min_days_ahead)
    while (candidate.weekday() + 1) % 7 != day_of_week:
        candidate += timedelta(days=1)
    return candidate


def local_instant(day: date, hour: int, minute: int = 0) -> datetime:
    """UTC instant of a Sao Paulo wall-clock time."""
    return local_to_utc(day, time(hour, minute))


# ============================================================================
# Database
# ============================================================================


@pytest.fixture
def test_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(test_engine) -> Session:
    TestingSessionLocal = sessionmaker(
        bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


# ============================================================================
# Users and reference data
# ============================================================================


@pytest.fixture
def make_user(db: Session) -> Callable[..., User]:
    counter = {"n": 0}

    def _make(role: RoleName = RoleName.STUDENT, name: str = None, level: str = None) -> User:
        counter["n"] += 1
        user = User(
            email=f"{role.value.lower()}{counter['n']}@example.com",
            name=name or f"{role.value.title()} {counter['n']}",
            role=role.value,
            level=level,
        )
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def teacher(make_user) -> User:
    return make_user(RoleName.TEACHER, name="Ana Teacher")


@pytest.fixture
def other_teacher(make_user) -> User:
    return make_user(RoleName.TEACHER, name="Bruno Teacher")


@pytest.fixture
def student(make_user) -> User:
    return make_user(RoleName.STUDENT, name="Carla Student", level="B1")


@pytest.fixture
def admin(make_user) -> User:
    return make_user(RoleName.ADMIN, name="Admin")


@pytest.fixture
def topic(db: Session) -> Topic:
    topic = Topic(name="Business English", description="Meetings and emails", level="B1")
    db.add(topic)
    db.commit()
    return topic


@pytest.fixture
def make_package(db: Session) -> Callable[..., LessonPackage]:
    def _make(
        owner: User,
        total: int = 1,
        used: int = 0,
        valid_until: datetime = None,
    ) -> LessonPackage:
        now = datetime.now(timezone.utc)
        package = LessonPackage(
            student_id=owner.id,
            total_lessons=total,
            used_lessons=used,
            remaining_lessons=total - used,
            valid_from=now - timedelta(days=1),
            valid_until=valid_until or now + timedelta(days=60),
        )
        db.add(package)
        db.commit()
        return package

    return _make


@pytest.fixture
def package(make_package, student) -> LessonPackage:
    return make_package(student, total=1)


@pytest.fixture
def make_window(db: Session) -> Callable[..., TeacherAvailability]:
    def _make(
        owner: User,
        day_of_week: int = MONDAY,
        start_time: str = "09:00",
        end_time: str = "12:00",
        is_active: bool = True,
    ) -> TeacherAvailability:
        window = TeacherAvailability(
            teacher_id=owner.id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
        )
        db.add(window)
        db.commit()
        return window

    return _make


@pytest.fixture
def monday_window(make_window, teacher) -> TeacherAvailability:
    return make_window(teacher)


@pytest.fixture
def linked_teacher(db: Session, teacher: User) -> User:
    db.add(ExternalAccount(user_id=teacher.id, provider="google", refresh_token="refresh-abc"))
    db.commit()
    return teacher


@pytest.fixture
def next_monday() -> date:
    return next_local_weekday(MONDAY)


# ============================================================================
# HTTP client
# ============================================================================


@pytest.fixture
def fake_calendar() -> FakeGoogleCalendarClient:
    return FakeGoogleCalendarClient()


@pytest.fixture
def client(db: Session, fake_calendar: FakeGoogleCalendarClient):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_calendar_client] = lambda: fake_calendar
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers_for() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token({"sub": user.id})
        return {"Authorization": f"Bearer {token}"}

    return _headers
