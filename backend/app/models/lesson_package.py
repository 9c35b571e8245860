# backend/app/models/lesson_package.py
"""
Lesson package model.

A package is a purchased block of lesson credits. ``remaining_lessons`` is
denormalized and must always equal ``total_lessons - used_lessons``; the
check constraints keep it honest even under concurrent decrements.
"""

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class LessonPackage(Base):
    """Block of lesson credits owned by a student."""

    __tablename__ = "lesson_packages"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    student_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    total_lessons = Column(Integer, nullable=False)
    used_lessons = Column(Integer, nullable=False, default=0)
    remaining_lessons = Column(Integer, nullable=False)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    student = relationship("User", back_populates="lesson_packages")

    __table_args__ = (
        CheckConstraint("remaining_lessons >= 0", name="ck_packages_remaining_non_negative"),
        CheckConstraint("used_lessons >= 0", name="ck_packages_used_non_negative"),
        CheckConstraint(
            "used_lessons + remaining_lessons = total_lessons",
            name="ck_packages_balance",
        ),
        Index("idx_packages_student_valid_until", "student_id", "valid_until"),
    )

    def __repr__(self) -> str:
        return (
            f"<LessonPackage {self.id}: student={self.student_id} "
            f"{self.remaining_lessons}/{self.total_lessons} until={self.valid_until}>"
        )
