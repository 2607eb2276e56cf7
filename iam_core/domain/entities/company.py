"""
Company Entity

Tenant organization a user can log into.
"""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, Relationship, SQLModel

from iam_core.domain.base import utc_now
from .enums import CompanyStatus

if TYPE_CHECKING:
    from .membership import UserCompany


class Company(SQLModel, table=True):
    """
    Company entity - isolated workspace for an organization.

    Business Rules:
    - Only active companies are offered at login and accepted for token minting
    - Company records are managed elsewhere; this service reads name and status
    """

    __tablename__ = "companies"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    business_name: str = Field(max_length=255)

    status: CompanyStatus = Field(default=CompanyStatus.active)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    # Relationships
    memberships: list["UserCompany"] = Relationship(back_populates="company")

    __table_args__ = (Index("idx_company_status", "status"),)
