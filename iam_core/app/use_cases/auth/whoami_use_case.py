"""
Whoami Use Case

Describes the bearer of an access token.
"""

from iam_core.app.errors import INVALID_CREDENTIALS
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.claims import AccessTokenClaims
from iam_core.libs.result import Result, Return
from .dtos import WhoamiResponse


class WhoamiUseCase:
    """
    Use case for resolving verified claims to user and company details.

    Business Rules:
    - Role comes from the token, not from the current membership
    - A user or company deleted since issuance fails with INVALID_CREDENTIALS
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, claims: AccessTokenClaims) -> Result[WhoamiResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(claims.user_id)
            company = await self.uow.companies.get_by_id(claims.company_id)
            if user is None or company is None:
                return Return.err(INVALID_CREDENTIALS)

            return Return.ok(
                WhoamiResponse(
                    user_id=str(user.id),
                    full_name=user.full_name,
                    email=user.email,
                    email_validated=user.email_validated,
                    status=user.status.value,
                    company_id=str(company.id),
                    company_name=company.business_name,
                    role=claims.role,
                )
            )
