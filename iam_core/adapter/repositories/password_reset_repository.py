from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from iam_core.app.repositories.password_reset_repository import IPasswordResetRepository
from iam_core.domain.entities import PasswordResetRequest, ResetPasswordStatus


class PasswordResetRepository(IPasswordResetRepository):
    """PasswordResetRequest repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, request: PasswordResetRequest) -> PasswordResetRequest:
        """Create a new password reset request"""
        self.session.add(request)
        await self.session.flush()
        await self.session.refresh(request)
        return request

    async def get_by_token_hash(self, token_hash: str) -> Optional[PasswordResetRequest]:
        """Get password reset request by token hash"""
        stmt = (
            select(PasswordResetRequest)
            .where(PasswordResetRequest.token_hash == token_hash)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def mark_used(self, request_id: UUID, now: datetime) -> bool:
        """REQUESTED -> USED, only while unexpired"""
        return await self._transition(
            request_id,
            ResetPasswordStatus.used,
            PasswordResetRequest.expires_at > now,
            used_at=now,
        )

    async def mark_expired(self, request_id: UUID) -> bool:
        """REQUESTED -> EXPIRED"""
        return await self._transition(request_id, ResetPasswordStatus.expired)

    async def revoke_open_by_user_id(self, user_id: UUID) -> int:
        """REQUESTED -> REVOKED for every open request of a user"""
        stmt = (
            update(PasswordResetRequest)
            .where(
                PasswordResetRequest.user_id == user_id,
                PasswordResetRequest.status == ResetPasswordStatus.requested,
            )
            .values(status=ResetPasswordStatus.revoked)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def expire_stale(self, now: datetime) -> int:
        """REQUESTED -> EXPIRED for every request past expiry"""
        stmt = (
            update(PasswordResetRequest)
            .where(
                PasswordResetRequest.status == ResetPasswordStatus.requested,
                PasswordResetRequest.expires_at <= now,
            )
            .values(status=ResetPasswordStatus.expired)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def _transition(self, request_id: UUID, target, *criteria, **values) -> bool:
        stmt = (
            update(PasswordResetRequest)
            .where(
                PasswordResetRequest.id == request_id,
                PasswordResetRequest.status == ResetPasswordStatus.requested,
                *criteria,
            )
            .values(status=target, **values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1
