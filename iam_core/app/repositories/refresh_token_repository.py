from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from iam_core.domain.entities import RefreshToken


class IRefreshTokenRepository(ABC):
    """RefreshToken repository interface - application layer"""

    @abstractmethod
    async def create(self, token: RefreshToken) -> RefreshToken:
        """Persist a new refresh token row"""
        pass

    @abstractmethod
    async def get_by_token_hash(self, token_hash: str) -> Optional[RefreshToken]:
        """Get refresh token by SHA-256 hash of the secret"""
        pass

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> List[RefreshToken]:
        """Get all refresh tokens of a user"""
        pass

    @abstractmethod
    async def revoke_by_id(self, token_id: UUID, now: datetime) -> bool:
        """Revoke one token if not yet revoked. Returns True if this call revoked it."""
        pass

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Revoke every non-revoked token of a user in one statement. Returns count."""
        pass

    @abstractmethod
    async def count_active_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Count non-revoked, unexpired tokens of a user"""
        pass
