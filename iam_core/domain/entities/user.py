"""
User Entity

Represents a person who can belong to multiple companies.
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Relationship, SQLModel

from iam_core.domain.base import utc_now
from .enums import UserStatus

if TYPE_CHECKING:
    from .membership import UserCompany


class User(SQLModel, table=True):
    """
    User entity - a person who can belong to multiple companies.

    Business Rules:
    - Email must be unique across all users
    - Password stored as a one-way hash (bcrypt)
    - Only status=active users can authenticate; the company-level
      status lives on the membership
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    full_name: str = Field(default="", max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars

    status: UserStatus = Field(default=UserStatus.active)
    email_validated: bool = Field(default=False)

    last_password_change_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    # Relationships
    memberships: list["UserCompany"] = Relationship(back_populates="user")
