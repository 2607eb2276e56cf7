from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from iam_core.app.repositories.refresh_token_repository import IRefreshTokenRepository
from iam_core.domain.entities import RefreshToken


class RefreshTokenRepository(IRefreshTokenRepository):
    """RefreshToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, token: RefreshToken) -> RefreshToken:
        """Create a new refresh token row"""
        self.session.add(token)
        await self.session.flush()
        await self.session.refresh(token)
        return token

    async def get_by_token_hash(self, token_hash: str) -> Optional[RefreshToken]:
        """
        Get refresh token by hash.

        Revoked/expired rows are returned too; the caller decides so that
        "not found" and "found but unusable" stay distinguishable in audit.
        """
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_user_id(self, user_id: UUID) -> List[RefreshToken]:
        """Get all refresh tokens for a user"""
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def revoke_by_id(self, token_id: UUID, now: datetime) -> bool:
        """Revoke a specific token if it is not revoked yet"""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def revoke_all_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Revoke all active tokens for a user in one statement"""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked == False)  # noqa: E712
            .values(revoked=True, revoked_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def count_active_by_user_id(self, user_id: UUID, now: datetime) -> int:
        """Count non-revoked, unexpired tokens for a user"""
        stmt = select(func.count()).select_from(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.revoked == False,  # noqa: E712
            RefreshToken.expires_at > now,
        )
        result = await self.session.exec(stmt)
        return result.one()
