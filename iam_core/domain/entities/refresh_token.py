"""
RefreshToken Entity

Stores hashed refresh tokens, one row per session.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from iam_core.domain.base import utc_now


class RefreshToken(SQLModel, table=True):
    """
    RefreshToken entity - server side half of a session.

    Business Rules:
    - Only the SHA-256 hash of the secret is stored
    - revoked=True is terminal
    - Scoped to the company selected at login
    - Expires after REFRESH_TOKEN_TTL_DAYS (30 by default)
    """

    __tablename__ = "refresh_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    company_id: UUID = Field(foreign_key="companies.id", nullable=False, index=True)

    token_hash: str = Field(unique=True, index=True, max_length=64)  # SHA-256 hex
    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    client_info: Optional[str] = Field(default=None, max_length=512)

    # Timestamps
    issued_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_refresh_token_user_revoked", "user_id", "revoked"),
        Index("idx_refresh_token_expires_at", "expires_at"),
    )

    def is_active(self, now: datetime) -> bool:
        return not self.revoked and self.expires_at > now
