# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the booking backend

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- RepositoryFactory: Factory for creating repository instances
- AvailabilityRepository: Recurring weekly teacher windows
- BookingRepository: Bookings, occupancy counts and class seat counters
- PackageRepository: Lesson credits with atomic decrement/refund
- UserRepository / TopicRepository: Lookups

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_booking_repository(db)
    taken = repository.count_bookings(teacher_id, scheduled_at)
"""

from .availability_repository import AvailabilityRepository
from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .package_repository import PackageRepository
from .user_repository import TopicRepository, UserRepository

__all__ = [
    "AvailabilityRepository",
    "BaseRepository",
    "BookingRepository",
    "PackageRepository",
    "RepositoryFactory",
    "TopicRepository",
    "UserRepository",
]
