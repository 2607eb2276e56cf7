"""
PasswordResetRequest Entity

Tracks password recovery requests and their status.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from iam_core.domain.base import utc_now
from .enums import ResetPasswordStatus


class PasswordResetRequest(SQLModel, table=True):
    """
    PasswordResetRequest entity - one emailed reset token.

    Business Rules:
    - Token is stored as SHA-256 hash of the emailed secret
    - Password can only be changed from REQUESTED and before expires_at
    - REQUESTED -> USED is terminal and revokes every refresh token of the user
    """

    __tablename__ = "password_reset_requests"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", index=True)
    token_hash: str = Field(unique=True, index=True, max_length=64)  # SHA-256 hex

    status: ResetPasswordStatus = Field(default=ResetPasswordStatus.requested)

    # Timestamps
    requested_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    __table_args__ = (
        Index("idx_password_reset_status", "status"),
        Index("idx_password_reset_expires_at", "expires_at"),
    )
