"""
Request Ticket Use Case

First login step: checks credentials and hands out a single-use login
ticket plus the companies the user can choose from.
"""

import logging
from typing import Optional

from iam_core.app.errors import INVALID_CREDENTIALS
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.credential_verifier import ICredentialVerifier
from iam_core.app.services.login_ticket_service import LoginTicketService
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import (
    AuditEvent,
    CompanyStatus,
    MembershipStatus,
    User,
    UserStatus,
)
from iam_core.libs.result import Result, Return
from .dtos import AssociatedCompanies, ClientContext, CompanySummary, UserInfo

logger = logging.getLogger(__name__)


class RequestTicketUseCase:
    """
    Use case for the credential step of the two-step login.

    Business Rules:
    - Unknown email, wrong password and inactive user all return the same
      INVALID_CREDENTIALS error
    - A hash check is spent even when the email is unknown
    - Only memberships that are active in an active company are listed
    - The ticket is bound to the verified email and expires after
      LOGIN_TICKET_TTL_MINUTES
    """

    def __init__(
        self,
        uow: UnitOfWork,
        verifier: ICredentialVerifier,
        clock: ClockSource,
        tickets: Optional[LoginTicketService] = None,
    ):
        self.uow = uow
        self.verifier = verifier
        self.clock = clock
        self.tickets = tickets or LoginTicketService(uow, clock)

    async def execute(
        self, email: str, password: str, client: Optional[ClientContext] = None
    ) -> Result[AssociatedCompanies]:
        """
        Execute request ticket use case.

        Args:
            email: User email
            password: Plain text password
            client: Caller IP / user agent for the audit trail

        Returns:
            Result with AssociatedCompanies, or INVALID_CREDENTIALS
        """
        client = client or ClientContext()
        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            if user is None:
                self.verifier.burn(password)
                logger.warning("Login attempt for unknown email=%s", email)
                return Return.err(INVALID_CREDENTIALS)

            if not self.verifier.verify(password, user.password_hash):
                logger.warning("User password not match for email=%s", email)
                await self._record_failure(user, "password mismatch", client)
                return Return.err(INVALID_CREDENTIALS)

            if user.status != UserStatus.active:
                logger.warning("User not active for email=%s", email)
                await self._record_failure(
                    user, f"user status {user.status.value}", client
                )
                return Return.err(INVALID_CREDENTIALS)

            companies = await self._eligible_companies(user)
            ticket = await self.tickets.issue(user.email)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="login_ticket_issued",
                    event_metadata={
                        "companies": len(companies),
                        **client.as_metadata(),
                    },
                    created_at=self.clock.now(),
                )
            )

            await self.uow.commit()

            logger.info("Credentials accepted for email=%s", email)
            return Return.ok(
                AssociatedCompanies(
                    user=UserInfo.from_user(user),
                    companies=companies,
                    login_ticket=ticket.id,
                )
            )

    async def _eligible_companies(self, user: User) -> list[CompanySummary]:
        memberships = await self.uow.memberships.get_by_user_id(user.id)
        summaries = []
        for membership in memberships:
            if membership.status != MembershipStatus.active:
                continue
            company = await self.uow.companies.get_by_id(membership.company_id)
            if company is None or company.status != CompanyStatus.active:
                continue
            summaries.append(
                CompanySummary(
                    company_id=str(company.id),
                    business_name=company.business_name,
                    role=membership.role.value,
                )
            )
        return summaries

    async def _record_failure(
        self, user: User, reason: str, client: ClientContext
    ) -> None:
        await self.uow.audit_events.create(
            AuditEvent(
                user_id=user.id,
                action="login_failure",
                event_metadata={"reason": reason, **client.as_metadata()},
                created_at=self.clock.now(),
            )
        )
        await self.uow.commit()
