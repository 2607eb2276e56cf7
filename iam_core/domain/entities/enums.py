"""
IAM Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserStatus(str, Enum):
    """Global user account status"""

    active = "active"
    pending = "pending"
    disabled = "disabled"
    suspended = "suspended"


class CompanyStatus(str, Enum):
    """Company status"""

    active = "active"
    inactive = "inactive"
    suspended = "suspended"


class CompanyRole(str, Enum):
    """User role within a company (flat strings, carried in access tokens)"""

    owner = "OWNER"
    admin = "ADMIN"
    member = "MEMBER"
    viewer = "VIEWER"


class MembershipStatus(str, Enum):
    """Per-company membership status"""

    active = "active"
    disabled = "disabled"
    invited = "invited"
    blocked = "blocked"


class ResetPasswordStatus(str, Enum):
    """Password reset request lifecycle"""

    requested = "REQUESTED"
    used = "USED"
    expired = "EXPIRED"
    revoked = "REVOKED"
