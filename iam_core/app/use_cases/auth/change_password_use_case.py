"""
Change Password Use Case

Lets an authenticated user replace their password.
"""

import logging
from typing import Optional
from uuid import UUID

from iam_core.app.errors import INVALID_CREDENTIALS
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.credential_verifier import ICredentialVerifier
from iam_core.app.services.refresh_token_service import RefreshTokenService
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import AuditEvent
from iam_core.libs.result import Result, Return
from .dtos import ChangePasswordResponse, ClientContext
from .password_policy import validate_password

logger = logging.getLogger(__name__)


class ChangePasswordUseCase:
    """
    Use case for changing the password of the current user.

    Business Rules:
    - New password must pass the password policy
    - Current password must verify, otherwise INVALID_CREDENTIALS
    - Every refresh token of the user is revoked
    - Open password reset requests are revoked
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
        user_id: UUID,
        current_password: str,
        new_password: str,
        client: Optional[ClientContext] = None,
    ) -> Result[ChangePasswordResponse]:
        client = client or ClientContext()
        policy = validate_password(new_password)
        if policy.is_err():
            return Return.err(policy.error)

        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None or not self.verifier.verify(
                current_password, user.password_hash
            ):
                logger.warning("Password change rejected for user_id=%s", user_id)
                return Return.err(INVALID_CREDENTIALS)

            now = self.clock.now()
            user.password_hash = self.verifier.hash(new_password)
            user.last_password_change_at = now
            user.updated_at = now
            await self.uow.users.update(user)

            revoked = await self.refresh_tokens.revoke_all_for_user(user.id)
            await self.uow.password_resets.revoke_open_by_user_id(user.id)

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="password_changed",
                    event_metadata={
                        "refresh_tokens_revoked": revoked,
                        **client.as_metadata(),
                    },
                    created_at=now,
                )
            )
            await self.uow.commit()

            return Return.ok(ChangePasswordResponse(message="Password changed"))
