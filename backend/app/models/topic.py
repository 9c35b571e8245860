# backend/app/models/topic.py
"""Class topic model."""

from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.sql import func
import ulid

from ..database import Base


class Topic(Base):
    """A lesson topic students book classes for."""

    __tablename__ = "topics"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    level = Column(String(20), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Topic {self.id}: {self.name}>"
