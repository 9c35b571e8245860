# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

These are plain ``def`` dependencies: FastAPI runs them in its threadpool,
so the synchronous user lookup never blocks the event loop.
"""

import logging

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from ...auth import get_current_user_id
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """
    Load the user named by the bearer token.

    Raises:
        HTTPException: 401 if the user no longer exists
    """
    user = RepositoryFactory.create_user_repository(db).get_by_id(user_id)
    if user is None:
        logger.info("Token subject not found", extra={"user_id": user_id})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_active_user(current_user: User = Depends(get_current_user)) -> User:
    """
    Get the current authenticated and active user.

    Raises:
        HTTPException: If user is not active
    """
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    return current_user


def get_current_teacher(current_user: User = Depends(get_current_active_user)) -> User:
    """Current user, required to be a teacher (admins pass too)."""
    if not (current_user.is_teacher or current_user.is_admin):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a teacher")
    return current_user


def get_current_student(current_user: User = Depends(get_current_active_user)) -> User:
    """
    Get the current authenticated student.

    Raises:
        HTTPException: If user is not a student
    """
    if not current_user.is_student:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a student")
    return current_user
