"""
Logout Use Case

Revokes the refresh token held by the client.
"""

import logging
from typing import Optional

from iam_core.app.services.clock import ClockSource
from iam_core.app.services.refresh_token_service import RefreshTokenService
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import AuditEvent
from iam_core.libs.result import Result, Return
from .dtos import ClientContext, LogoutResponse

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for logging out one session.

    Business Rules:
    - Unknown token fails with INVALID_REFRESH_TOKEN
    - Revoking an already revoked token succeeds without changes
    - Revocation is a conditional update on the single row
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: ClockSource,
        refresh_tokens: Optional[RefreshTokenService] = None,
    ):
        self.uow = uow
        self.clock = clock
        self.refresh_tokens = refresh_tokens or RefreshTokenService(uow, clock)

    async def execute(
        self, refresh_token: str, client: Optional[ClientContext] = None
    ) -> Result[LogoutResponse]:
        client = client or ClientContext()
        async with self.uow:
            resolved = await self.refresh_tokens.resolve(refresh_token)
            if resolved.is_err():
                return Return.err(resolved.error)

            token = resolved.value
            revoked = await self.refresh_tokens.revoke(token)
            if revoked:
                await self.uow.audit_events.create(
                    AuditEvent(
                        company_id=token.company_id,
                        user_id=token.user_id,
                        action="logout",
                        event_metadata={
                            "refresh_token_id": str(token.id),
                            **client.as_metadata(),
                        },
                        created_at=self.clock.now(),
                    )
                )
            await self.uow.commit()

            logger.info("Logout for user_id=%s (revoked=%s)", token.user_id, revoked)
            return Return.ok(LogoutResponse(message="Logged out"))
