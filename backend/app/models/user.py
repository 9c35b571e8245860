# backend/app/models/user.py
"""
User model for the booking backend.

Students, teachers and admins all live in the users table and are told
apart by the role column. Linked OAuth accounts (used for calendar
integration) are stored separately in external_accounts.

Classes:
    User: Main user model
    ExternalAccount: OAuth account linkage (refresh token per provider)
"""

import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import RoleName
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Platform user.

    Attributes:
        id: ULID primary key
        email: Unique email address (used as calendar attendee)
        name: Display name
        role: One of STUDENT, TEACHER, ADMIN
        level: Student proficiency level (e.g. "B1"), optional
        is_active: Whether the account can act on the platform
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String(120), nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.STUDENT.value, index=True)
    level = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    external_accounts = relationship(
        "ExternalAccount", back_populates="user", cascade="all, delete-orphan"
    )
    lesson_packages = relationship("LessonPackage", back_populates="student")
    availability_windows = relationship("TeacherAvailability", back_populates="teacher")

    __table_args__ = (
        CheckConstraint("role IN ('STUDENT', 'TEACHER', 'ADMIN')", name="ck_users_role"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email} ({self.role})>"

    @property
    def is_student(self) -> bool:
        return self.role == RoleName.STUDENT.value

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleName.TEACHER.value

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value


class ExternalAccount(Base):
    """OAuth account linked to a user; holds the long-lived refresh token."""

    __tablename__ = "external_accounts"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    provider = Column(String(40), nullable=False)
    refresh_token = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="external_accounts")

    __table_args__ = (
        UniqueConstraint("user_id", "provider", name="uq_external_accounts_user_provider"),
    )

    def __repr__(self) -> str:
        return f"<ExternalAccount {self.provider} user={self.user_id}>"
