"""
IAM Domain Entities

All domain entities organized by model.
"""

from .enums import (
    UserStatus,
    CompanyStatus,
    CompanyRole,
    MembershipStatus,
    ResetPasswordStatus,
)

from .user import User
from .company import Company
from .membership import UserCompany
from .login_ticket import LoginTicket
from .refresh_token import RefreshToken
from .password_reset_request import PasswordResetRequest
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "UserStatus",
    "CompanyStatus",
    "CompanyRole",
    "MembershipStatus",
    "ResetPasswordStatus",
    # Entities
    "User",
    "Company",
    "UserCompany",
    "LoginTicket",
    "RefreshToken",
    "PasswordResetRequest",
    "AuditEvent",
]
