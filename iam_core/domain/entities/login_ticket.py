"""
LoginTicket Entity

Bridges credential verification and company selection.
"""

from datetime import datetime

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from iam_core.domain.base import utc_now


class LoginTicket(SQLModel, table=True):
    """
    LoginTicket entity - short-lived, single-use login ticket.

    Business Rules:
    - Id is an opaque random string and doubles as the lookup key
    - Bound to the email that passed the credential check
    - used=True is terminal; it is only ever set by the conditional consume
    - Expired tickets are swept by the purge job
    """

    __tablename__ = "login_tickets"

    id: str = Field(primary_key=True, max_length=64)
    email: str = Field(max_length=255)
    used: bool = Field(default=False)

    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_login_ticket_expires_at", "expires_at"),)
