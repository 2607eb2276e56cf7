from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from iam_core.domain.entities import PasswordResetRequest


class IPasswordResetRepository(ABC):
    """PasswordResetRequest repository interface - application layer"""

    @abstractmethod
    async def create(self, request: PasswordResetRequest) -> PasswordResetRequest:
        """Persist a new reset request"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetRequest]:
        """Get reset request by SHA-256 hash of the emailed token"""
        pass

    @abstractmethod
    async def mark_used(self, request_id: UUID, now: datetime) -> bool:
        """Transition REQUESTED -> USED if still REQUESTED and unexpired"""
        pass

    @abstractmethod
    async def mark_expired(self, request_id: UUID) -> bool:
        """Transition REQUESTED -> EXPIRED"""
        pass

    @abstractmethod
    async def revoke_open_by_user_id(self, user_id: UUID) -> int:
        """Transition every REQUESTED request of a user to REVOKED. Returns count."""
        pass

    @abstractmethod
    async def expire_stale(self, now: datetime) -> int:
        """Transition every REQUESTED request past expiry to EXPIRED. Returns count."""
        pass
