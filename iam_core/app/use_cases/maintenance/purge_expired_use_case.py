"""
Purge Expired Use Case

Housekeeping sweep for short-lived records.
"""

import logging

from pydantic import BaseModel

from iam_core.app.services.clock import ClockSource
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import AuditEvent
from iam_core.libs.result import Result, Return

logger = logging.getLogger(__name__)


class PurgeExpiredResponse(BaseModel):
    login_tickets_deleted: int
    password_resets_expired: int


class PurgeExpiredUseCase:
    """
    Use case for sweeping expired records.

    Business Rules:
    - Expired login tickets are deleted, used or not
    - REQUESTED reset requests past expiry move to EXPIRED
    - Refresh tokens are kept; they carry the revocation history
    """

    def __init__(self, uow: UnitOfWork, clock: ClockSource):
        self.uow = uow
        self.clock = clock

    async def execute(self) -> Result[PurgeExpiredResponse]:
        async with self.uow:
            now = self.clock.now()
            tickets = await self.uow.login_tickets.delete_expired(now)
            resets = await self.uow.password_resets.expire_stale(now)

            await self.uow.audit_events.create(
                AuditEvent(
                    action="expired_records_purged",
                    event_metadata={
                        "login_tickets_deleted": tickets,
                        "password_resets_expired": resets,
                    },
                    created_at=now,
                )
            )
            await self.uow.commit()

            logger.info(
                "Purged %d login tickets, expired %d reset requests", tickets, resets
            )
            return Return.ok(
                PurgeExpiredResponse(
                    login_tickets_deleted=tickets, password_resets_expired=resets
                )
            )
