"""
Login With Company Use Case

Second login step: redeems the login ticket for the chosen company and
mints the company-scoped session.
"""

import logging
from typing import Optional
from uuid import UUID

from config import ApplicationConfig
from iam_core.api.utils.jwt import generate_jwt
from iam_core.app.errors import INVALID_CREDENTIALS
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.login_ticket_service import LoginTicketService
from iam_core.app.services.refresh_token_service import RefreshTokenService
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import (
    AuditEvent,
    CompanyStatus,
    MembershipStatus,
    UserStatus,
)
from iam_core.libs.result import Result, Return
from .dtos import ClientContext, LoginResponse, UserInfo

logger = logging.getLogger(__name__)


class LoginWithCompanyUseCase:
    """
    Use case for company selection and token issuance.

    Business Rules:
    - The ticket is consumed first with a conditional update; a ticket
      that is unknown, used, expired or bound to another email fails
      with INVALID_TICKET
    - User must still exist and be active
    - Membership and company must be active
    - Everything runs in one unit of work: a failure after the consume
      rolls the consume back
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: ClockSource,
        tickets: Optional[LoginTicketService] = None,
        refresh_tokens: Optional[RefreshTokenService] = None,
    ):
        self.uow = uow
        self.clock = clock
        self.tickets = tickets or LoginTicketService(uow, clock)
        self.refresh_tokens = refresh_tokens or RefreshTokenService(uow, clock)

    async def execute(
        self,
        email: str,
        company_id: UUID,
        login_ticket: str,
        client: Optional[ClientContext] = None,
    ) -> Result[LoginResponse]:
        """
        Execute login with company use case.

        Args:
            email: Email the ticket was issued to
            company_id: Company selected by the user
            login_ticket: Ticket id from the credential step
            client: Caller IP / user agent

        Returns:
            Result with LoginResponse, or INVALID_TICKET / INVALID_CREDENTIALS
        """
        client = client or ClientContext()
        async with self.uow:
            redeemed = await self.tickets.redeem(login_ticket, email)
            if redeemed.is_err():
                return Return.err(redeemed.error)

            user = await self.uow.users.get_by_email(email)
            if user is None or user.status != UserStatus.active:
                logger.warning("User missing or not active at company login, email=%s", email)
                return Return.err(INVALID_CREDENTIALS)

            membership = await self.uow.memberships.get_by_user_and_company(
                user.id, company_id
            )
            if membership is None or membership.status != MembershipStatus.active:
                logger.warning(
                    "User email=%s not active in company_id=%s", email, company_id
                )
                return Return.err(INVALID_CREDENTIALS)

            company = await self.uow.companies.get_by_id(company_id)
            if company is None or company.status != CompanyStatus.active:
                logger.warning("Company company_id=%s not active", company_id)
                return Return.err(INVALID_CREDENTIALS)

            now = self.clock.now()
            role = membership.role.value
            access_token = generate_jwt(user.id, user.email, company_id, role, now=now)
            refresh_token = await self.refresh_tokens.issue(
                user.id, company_id, client.describe()
            )

            user.last_login_at = now
            await self.uow.users.update(user)

            await self.uow.audit_events.create(
                AuditEvent(
                    company_id=company_id,
                    user_id=user.id,
                    action="login_success",
                    event_metadata=client.as_metadata(),
                    created_at=now,
                )
            )

            await self.uow.commit()

            logger.info("Login successful for user %s in company %s", email, company_id)
            return Return.ok(
                LoginResponse(
                    access_token=access_token,
                    refresh_token=refresh_token,
                    expires_in=ApplicationConfig.JWT_ACCESS_TOKEN_MINUTES * 60,
                    user=UserInfo.from_user(user),
                    company_id=str(company_id),
                    role=role,
                )
            )
