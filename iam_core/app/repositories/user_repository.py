from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from iam_core.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Persist changes to an existing user"""
        pass
