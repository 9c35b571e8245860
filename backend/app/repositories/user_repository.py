# backend/app/repositories/user_repository.py
"""
User Repository for the booking backend

Handles User data access: basic lookups, role checks and the linked
external accounts used for calendar integration.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.constants import GOOGLE_PROVIDER
from ..core.enums import RoleName
from ..core.exceptions import RepositoryException
from ..models.topic import Topic
from ..models.user import ExternalAccount, User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User data access."""

    def __init__(self, db: Session):
        """Initialize with User model."""
        super().__init__(db, User)
        self.logger = logging.getLogger(__name__)

    def get_teacher(self, user_id: str) -> Optional[User]:
        """Get an active user holding the TEACHER role."""
        try:
            return (
                self.db.query(User)
                .filter(
                    User.id == user_id,
                    User.role == RoleName.TEACHER.value,
                    User.is_active.is_(True),
                )
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting teacher {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to get teacher: {str(e)}")

    def list_teachers(self) -> List[User]:
        """Active teachers ordered by name."""
        try:
            return (
                self.db.query(User)
                .filter(User.role == RoleName.TEACHER.value, User.is_active.is_(True))
                .order_by(User.name.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing teachers: {str(e)}")
            raise RepositoryException(f"Failed to list teachers: {str(e)}")

    # External accounts

    def get_external_account(
        self, user_id: str, provider: str = GOOGLE_PROVIDER
    ) -> Optional[ExternalAccount]:
        try:
            return (
                self.db.query(ExternalAccount)
                .filter(ExternalAccount.user_id == user_id, ExternalAccount.provider == provider)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {provider} account for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to get external account: {str(e)}")

    def get_refresh_token(self, user_id: str, provider: str = GOOGLE_PROVIDER) -> Optional[str]:
        """Refresh token of a linked account, or None when not linked."""
        account = self.get_external_account(user_id, provider)
        if account is None or not account.refresh_token:
            return None
        return account.refresh_token


class TopicRepository(BaseRepository[Topic]):
    """Repository for class topics."""

    def __init__(self, db: Session):
        super().__init__(db, Topic)
        self.logger = logging.getLogger(__name__)

    def get_active(self, topic_id: str) -> Optional[Topic]:
        try:
            return (
                self.db.query(Topic)
                .filter(Topic.id == topic_id, Topic.is_active.is_(True))
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting topic {topic_id}: {str(e)}")
            raise RepositoryException(f"Failed to get topic: {str(e)}")
