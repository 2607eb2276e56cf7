from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from iam_core.domain.entities import UserCompany


class IUserCompanyRepository(ABC):
    """Membership repository interface - application layer"""

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> List[UserCompany]:
        """Get all memberships for a user"""
        pass

    @abstractmethod
    async def get_by_user_and_company(
        self, user_id: UUID, company_id: UUID
    ) -> Optional[UserCompany]:
        """Get membership by user and company"""
        pass

    @abstractmethod
    async def revoke_all_by_user(self, user_id: UUID) -> int:
        """Disable every active membership of a user. Returns count."""
        pass
