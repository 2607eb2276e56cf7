from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from iam_core.domain.entities import Company


class ICompanyRepository(ABC):
    """Company repository interface - status and name lookups only"""

    @abstractmethod
    async def get_by_id(self, company_id: UUID) -> Optional[Company]:
        """Get company by ID"""
        pass
