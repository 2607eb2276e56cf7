"""
Confirm Password Reset Use Case

Handles password reset confirmation with secure token validation.
"""

import logging
from typing import Optional

from iam_core.app.errors import (
    INVALID_RESET_TOKEN,
    TOKEN_ALREADY_USED,
    TOKEN_EXPIRED,
)
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.credential_verifier import ICredentialVerifier
from iam_core.app.services.refresh_token_service import RefreshTokenService
from iam_core.app.services.token_hashing import hash_token
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import AuditEvent, ResetPasswordStatus
from iam_core.libs.result import Result, Return
from .dtos import ClientContext, ConfirmPasswordResetResponse
from .password_policy import validate_password

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token is validated by hashing and comparing with stored hash
    - Expired tokens fail with TOKEN_EXPIRED and are marked EXPIRED
    - Used or revoked tokens fail with TOKEN_ALREADY_USED
    - REQUESTED -> USED is a conditional update; of two concurrent
      confirmations only one succeeds
    - New password must meet the password policy
    - All refresh tokens of the user are revoked in the same transaction
    - Other open reset requests of the user are revoked
    """

    def __init__(
        self,
        uow: UnitOfWork,
        verifier: ICredentialVerifier,
        clock: ClockSource,
        refresh_tokens: Optional[RefreshTokenService] = None,
    ):
        self.uow = uow
        self.verifier = verifier
        self.clock = clock
        self.refresh_tokens = refresh_tokens or RefreshTokenService(uow, clock)

    async def execute(
        self,
        token: str,
        new_password: str,
        client: Optional[ClientContext] = None,
    ) -> Result[ConfirmPasswordResetResponse]:
        """
        Execute confirm password reset use case.

        Args:
            token: Password reset token (plain text from email)
            new_password: New password to set
            client: Caller IP / user agent

        Returns:
            Result with confirmation status, or Error

        Errors:
            - INVALID_PASSWORD: Password does not meet the policy
            - INVALID_RESET_TOKEN: Token not found
            - TOKEN_EXPIRED: Token has expired
            - TOKEN_ALREADY_USED: Token has already been used or revoked
        """
        client = client or ClientContext()
        policy = validate_password(new_password)
        if policy.is_err():
            return Return.err(policy.error)

        async with self.uow:
            request = await self.uow.password_resets.get_by_token_hash(
                hash_token(token)
            )
            if request is None:
                logger.warning("Unknown password reset token presented")
                return Return.err(INVALID_RESET_TOKEN)

            now = self.clock.now()

            if request.status == ResetPasswordStatus.expired:
                return Return.err(TOKEN_EXPIRED)

            if request.status != ResetPasswordStatus.requested:
                logger.warning(
                    "Reset request %s already %s", request.id, request.status.value
                )
                return Return.err(TOKEN_ALREADY_USED)

            if request.expires_at <= now:
                await self.uow.password_resets.mark_expired(request.id)
                await self.uow.commit()
                logger.info("Reset request %s expired", request.id)
                return Return.err(TOKEN_EXPIRED)

            if not await self.uow.password_resets.mark_used(request.id, now):
                logger.warning("Reset request %s consumed concurrently", request.id)
                return Return.err(TOKEN_ALREADY_USED)

            user = await self.uow.users.get_by_id(request.user_id)
            if user is None:
                # FK guarantees the user; treat a vanished row as an unusable token
                return Return.err(INVALID_RESET_TOKEN)

            user.password_hash = self.verifier.hash(new_password)
            user.last_password_change_at = now
            user.updated_at = now
            await self.uow.users.update(user)

            revoked_count = await self.refresh_tokens.revoke_all_for_user(user.id)
            await self.uow.password_resets.revoke_open_by_user_id(user.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="password_reset_confirmed",
                    event_metadata={
                        "reset_request_id": str(request.id),
                        "refresh_tokens_revoked": revoked_count,
                        **client.as_metadata(),
                    },
                    created_at=now,
                )
            )

            await self.uow.commit()

            return Return.ok(
                ConfirmPasswordResetResponse(
                    status="success",
                    message="Password has been reset successfully",
                )
            )
