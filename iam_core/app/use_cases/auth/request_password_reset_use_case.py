"""
Request Password Reset Use Case

Handles generating and sending password reset tokens.
"""

import logging
from datetime import timedelta
from typing import Callable, Optional

from config import ApplicationConfig
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.email_notifier import IEmailNotifier
from iam_core.app.services.token_hashing import generate_secret, hash_token
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import (
    AuditEvent,
    PasswordResetRequest,
    ResetPasswordStatus,
)
from iam_core.libs.result import Result, Return
from .dtos import ClientContext, RequestPasswordResetResponse

logger = logging.getLogger(__name__)

RESET_SUBJECT = "Reset your password"

EmailScheduler = Callable[..., None]


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Same response whether or not the email exists (no enumeration)
    - Token is a random secret; only its SHA-256 hash is stored
    - Token expires after PASSWORD_RESET_TTL_HOURS
    - Earlier open requests of the user are revoked
    - Email goes out after the commit through the scheduler, off the
      response path; delivery failures are logged only
    """

    def __init__(
        self,
        uow: UnitOfWork,
        notifier: IEmailNotifier,
        clock: ClockSource,
        ttl_hours: int = ApplicationConfig.PASSWORD_RESET_TTL_HOURS,
        reset_url: str = ApplicationConfig.PASSWORD_RESET_URL,
        schedule: Optional[EmailScheduler] = None,
    ):
        self.uow = uow
        self.notifier = notifier
        self.clock = clock
        self.ttl = timedelta(hours=ttl_hours)
        self.reset_url = reset_url
        self.schedule = schedule

    async def execute(
        self, email: str, client: Optional[ClientContext] = None
    ) -> Result[RequestPasswordResetResponse]:
        """
        Execute request password reset use case.

        Args:
            email: User's email address
            client: Caller IP / user agent

        Returns:
            Result with the generic reset status
        """
        client = client or ClientContext()
        response = RequestPasswordResetResponse(
            status="sent",
            message="If the email exists, a password reset link has been sent",
        )

        async with self.uow:
            user = await self.uow.users.get_by_email(email)
            if user is None:
                logger.info("Password reset requested for unknown email=%s", email)
                return Return.ok(response)

            now = self.clock.now()
            reset_token = generate_secret(32)

            await self.uow.password_resets.revoke_open_by_user_id(user.id)
            request = await self.uow.password_resets.create(
                PasswordResetRequest(
                    user_id=user.id,
                    token_hash=hash_token(reset_token),
                    status=ResetPasswordStatus.requested,
                    requested_at=now,
                    expires_at=now + self.ttl,
                )
            )

            await self.uow.audit_events.create(
                AuditEvent(
                    user_id=user.id,
                    action="password_reset_requested",
                    event_metadata={
                        "reset_request_id": str(request.id),
                        **client.as_metadata(),
                    },
                    created_at=now,
                )
            )

            await self.uow.commit()

        if self.schedule is None:
            await self.deliver(user.email, reset_token)
        else:
            self.schedule(self.deliver, user.email, reset_token)
        return Return.ok(response)

    async def deliver(self, to: str, reset_token: str) -> None:
        """Send the reset link. Runs as a background task; never raises."""
        link = self.reset_url.format(token=reset_token)
        body = (
            "We received a request to reset your password.\n\n"
            f"Open this link to choose a new one: {link}\n\n"
            f"The link expires in {int(self.ttl.total_seconds() // 3600)} hours. "
            "If you did not ask for this, you can ignore this email."
        )
        try:
            await self.notifier.send(to, RESET_SUBJECT, body)
        except Exception:
            logger.exception("Password reset email could not be delivered to %s", to)
