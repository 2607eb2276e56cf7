from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from iam_core.app.repositories.company_repository import ICompanyRepository
from iam_core.domain.entities import Company


class CompanyRepository(ICompanyRepository):
    """Company repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, company_id: UUID) -> Optional[Company]:
        """Get company by ID"""
        stmt = select(Company).where(Company.id == company_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()
