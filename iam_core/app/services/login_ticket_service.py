"""
Login ticket issuance and single-use redemption.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from config import ApplicationConfig
from iam_core.app.errors import INVALID_TICKET
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.token_hashing import generate_secret
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import LoginTicket
from iam_core.libs.result import Result, Return

logger = logging.getLogger(__name__)


class LoginTicketService:
    """
    Issues and redeems login tickets.

    Must be used inside an entered UnitOfWork; the caller owns the commit.
    Redemption is one conditional update, so of two concurrent redemptions
    of the same ticket only one can match the row.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: ClockSource,
        ttl_minutes: int = ApplicationConfig.LOGIN_TICKET_TTL_MINUTES,
    ):
        self.uow = uow
        self.clock = clock
        self.ttl = timedelta(minutes=ttl_minutes)

    async def issue(self, email: str) -> LoginTicket:
        now = self.clock.now()
        ticket = LoginTicket(
            id=generate_secret(32),
            email=email,
            used=False,
            created_at=now,
            expires_at=now + self.ttl,
        )
        return await self.uow.login_tickets.create(ticket)

    async def redeem(self, ticket_id: str, email: str) -> Result[LoginTicket]:
        now = self.clock.now()
        consumed = await self.uow.login_tickets.consume(ticket_id, email, now)
        ticket = await self.uow.login_tickets.get_by_id(ticket_id)

        if not consumed or ticket is None:
            logger.warning(
                "Login ticket rejected for email=%s: %s",
                email,
                self._rejection_reason(ticket, email, now),
            )
            return Return.err(INVALID_TICKET)

        return Return.ok(ticket)

    @staticmethod
    def _rejection_reason(
        ticket: Optional[LoginTicket], email: str, now: datetime
    ) -> str:
        if ticket is None:
            return "unknown ticket"
        if ticket.used:
            return "ticket already used"
        if ticket.expires_at <= now:
            return "ticket expired"
        if ticket.email.lower() != email.lower():
            return "ticket bound to another email"
        return "ticket consumed concurrently"
