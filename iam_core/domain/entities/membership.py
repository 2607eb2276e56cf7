"""
UserCompany Entity

Links User to Company with a role.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, Relationship, SQLModel

from iam_core.domain.base import utc_now
from .enums import CompanyRole, MembershipStatus

if TYPE_CHECKING:
    from .user import User
    from .company import Company


class UserCompany(SQLModel, table=True):
    """
    UserCompany entity - membership of a user in a company.

    Business Rules:
    - One user can be member of multiple companies
    - (user_id, company_id) must be unique
    - Only active memberships can be selected at login
    """

    __tablename__ = "user_companies"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    company_id: UUID = Field(foreign_key="companies.id", nullable=False, index=True)

    role: CompanyRole = Field(nullable=False)
    status: MembershipStatus = Field(default=MembershipStatus.active)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    # Relationships
    user: "User" = Relationship(back_populates="memberships")
    company: "Company" = Relationship(back_populates="memberships")

    __table_args__ = (
        Index("idx_user_company_user_company", "user_id", "company_id", unique=True),
        Index("idx_user_company_status", "status"),
    )
