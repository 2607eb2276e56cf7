"""
Refresh Token Use Case

Exchanges a refresh token for a new company-scoped access token.
"""

import logging
from typing import Optional

from config import ApplicationConfig
from iam_core.api.utils.jwt import generate_jwt
from iam_core.app.errors import REVOKED_OR_EXPIRED_TOKEN
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.refresh_token_service import RefreshTokenService
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import (
    AuditEvent,
    CompanyStatus,
    MembershipStatus,
    UserStatus,
)
from iam_core.libs.result import Result, Return
from .dtos import ClientContext, RefreshTokenResponse

logger = logging.getLogger(__name__)


class RefreshTokenUseCase:
    """
    Use case for refreshing JWT access tokens.

    Business Rules:
    - Token is looked up by its SHA-256 hash only
    - Revoked or expired tokens fail with REVOKED_OR_EXPIRED_TOKEN
    - User, membership and company must still be active
    - Without rotation the same refresh token keeps working until expiry
    - With rotation the old token is revoked by a conditional update and a
      new one is issued; the loser of two concurrent refreshes is rejected
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: ClockSource,
        rotate: Optional[bool] = None,
        refresh_tokens: Optional[RefreshTokenService] = None,
    ):
        self.uow = uow
        self.clock = clock
        self.rotate = ApplicationConfig.REFRESH_TOKEN_ROTATION if rotate is None else rotate
        self.refresh_tokens = refresh_tokens or RefreshTokenService(uow, clock)

    async def execute(
        self, refresh_token: str, client: Optional[ClientContext] = None
    ) -> Result[RefreshTokenResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: Plaintext refresh token presented by the client
            client: Caller IP / user agent

        Returns:
            Result with RefreshTokenResponse, or INVALID_REFRESH_TOKEN /
            REVOKED_OR_EXPIRED_TOKEN
        """
        client = client or ClientContext()
        async with self.uow:
            resolved = await self.refresh_tokens.resolve(refresh_token)
            if resolved.is_err():
                logger.warning("Unknown refresh token presented")
                return Return.err(resolved.error)

            token = resolved.value
            now = self.clock.now()
            if not token.is_active(now):
                logger.warning(
                    "Refresh token %s rejected: %s",
                    token.id,
                    "revoked" if token.revoked else "expired",
                )
                return Return.err(REVOKED_OR_EXPIRED_TOKEN)

            user = await self.uow.users.get_by_id(token.user_id)
            if user is None or user.status != UserStatus.active:
                logger.warning("Refresh for inactive user_id=%s", token.user_id)
                return Return.err(REVOKED_OR_EXPIRED_TOKEN)

            membership = await self.uow.memberships.get_by_user_and_company(
                token.user_id, token.company_id
            )
            if membership is None or membership.status != MembershipStatus.active:
                logger.warning(
                    "Refresh for revoked membership user_id=%s company_id=%s",
                    token.user_id,
                    token.company_id,
                )
                return Return.err(REVOKED_OR_EXPIRED_TOKEN)

            company = await self.uow.companies.get_by_id(token.company_id)
            if company is None or company.status != CompanyStatus.active:
                logger.warning("Refresh for inactive company_id=%s", token.company_id)
                return Return.err(REVOKED_OR_EXPIRED_TOKEN)

            new_refresh_token = None
            if self.rotate:
                if not await self.refresh_tokens.revoke(token):
                    logger.warning("Refresh token %s lost a rotation race", token.id)
                    return Return.err(REVOKED_OR_EXPIRED_TOKEN)
                new_refresh_token = await self.refresh_tokens.issue(
                    token.user_id, token.company_id, client.describe()
                )

            await self.uow.audit_events.create(
                AuditEvent(
                    company_id=token.company_id,
                    user_id=token.user_id,
                    action="token_refresh",
                    event_metadata={
                        "refresh_token_id": str(token.id),
                        "rotated": self.rotate,
                        **client.as_metadata(),
                    },
                    created_at=now,
                )
            )

            await self.uow.commit()

            access_token = generate_jwt(
                user.id, user.email, token.company_id, membership.role.value, now=now
            )

            return Return.ok(
                RefreshTokenResponse(
                    access_token=access_token,
                    expires_in=ApplicationConfig.JWT_ACCESS_TOKEN_MINUTES * 60,
                    refresh_token=new_refresh_token,
                )
            )
