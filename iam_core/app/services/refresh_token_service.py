"""
Refresh token store: hashed-at-rest refresh tokens.
"""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from config import ApplicationConfig
from iam_core.app.errors import INVALID_REFRESH_TOKEN
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.token_hashing import generate_secret, hash_token
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.domain.entities import RefreshToken
from iam_core.libs.result import Result, Return

logger = logging.getLogger(__name__)


class RefreshTokenService:
    """
    Issues, resolves and revokes refresh tokens.

    Business Rules:
    - The plaintext secret only exists in the return value of issue()
    - Every lookup goes through the SHA-256 hash
    - Revocation is a conditional update; revoked rows are never un-revoked
    - revoke_all_for_user is a point-in-time cut: tokens committed after
      the statement stay valid
    """

    def __init__(
        self,
        uow: UnitOfWork,
        clock: ClockSource,
        ttl_days: int = ApplicationConfig.REFRESH_TOKEN_TTL_DAYS,
    ):
        self.uow = uow
        self.clock = clock
        self.ttl = timedelta(days=ttl_days)

    async def issue(
        self, user_id: UUID, company_id: UUID, client_info: Optional[str] = None
    ) -> str:
        plaintext = generate_secret(48)
        now = self.clock.now()
        await self.uow.refresh_tokens.create(
            RefreshToken(
                user_id=user_id,
                company_id=company_id,
                token_hash=hash_token(plaintext),
                client_info=client_info,
                issued_at=now,
                expires_at=now + self.ttl,
            )
        )
        return plaintext

    async def resolve(self, plaintext: str) -> Result[RefreshToken]:
        """Find the row for a presented secret. Revoked/expired checks are the caller's."""
        token = await self.uow.refresh_tokens.get_by_token_hash(hash_token(plaintext))
        if token is None:
            return Return.err(INVALID_REFRESH_TOKEN)
        return Return.ok(token)

    async def revoke(self, token: RefreshToken) -> bool:
        return await self.uow.refresh_tokens.revoke_by_id(token.id, self.clock.now())

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        count = await self.uow.refresh_tokens.revoke_all_by_user_id(
            user_id, self.clock.now()
        )
        logger.info("Revoked %d refresh tokens for user_id=%s", count, user_id)
        return count
