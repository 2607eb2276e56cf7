from typing import List, Optional
from uuid import UUID

from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from iam_core.app.repositories.membership_repository import IUserCompanyRepository
from iam_core.domain.entities import MembershipStatus, UserCompany


class UserCompanyRepository(IUserCompanyRepository):
    """Membership repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: UUID) -> List[UserCompany]:
        """Get all memberships for a user"""
        stmt = (
            select(UserCompany)
            .where(UserCompany.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_user_and_company(
        self, user_id: UUID, company_id: UUID
    ) -> Optional[UserCompany]:
        """Get membership by user and company"""
        stmt = (
            select(UserCompany)
            .where(UserCompany.user_id == user_id, UserCompany.company_id == company_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def revoke_all_by_user(self, user_id: UUID) -> int:
        """Disable every active membership of a user"""
        stmt = (
            update(UserCompany)
            .where(
                UserCompany.user_id == user_id,
                UserCompany.status == MembershipStatus.active,
            )
            .values(status=MembershipStatus.disabled)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
