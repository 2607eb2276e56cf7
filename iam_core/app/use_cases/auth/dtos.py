"""
Authentication Use Case DTOs (Data Transfer Objects)

Response classes for the auth domain plus the caller context passed in
by the API layer.
"""

from typing import List, Optional

from pydantic import BaseModel

from iam_core.domain.entities import User


# ============================================================================
# Command context
# ============================================================================


class ClientContext(BaseModel):
    """Where a request came from; stored in audit metadata and on refresh tokens"""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def describe(self) -> Optional[str]:
        parts = [p for p in (self.ip_address, self.user_agent) if p]
        return " | ".join(parts)[:512] if parts else None

    def as_metadata(self) -> dict:
        return {"ip_address": self.ip_address, "user_agent": self.user_agent}


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(BaseModel):
    """User information in authentication responses"""

    id: str
    full_name: str
    email: str
    email_validated: bool
    status: str

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            id=str(user.id),
            full_name=user.full_name,
            email=user.email,
            email_validated=user.email_validated,
            status=user.status.value,
        )


class CompanySummary(BaseModel):
    """A company the user may select in the second login step"""

    company_id: str
    business_name: str
    role: str


class AssociatedCompanies(BaseModel):
    """Response for the credential step: eligible companies and a login ticket"""

    user: UserInfo
    companies: List[CompanySummary]
    login_ticket: str


class LoginResponse(BaseModel):
    """Response for login with company"""

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int
    user: UserInfo
    company_id: str
    role: str


class RefreshTokenResponse(BaseModel):
    """Response for refresh; refresh_token is only set when rotation is enabled"""

    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_token: Optional[str] = None


class LogoutResponse(BaseModel):
    message: str


class WhoamiResponse(BaseModel):
    user_id: str
    full_name: str
    email: str
    email_validated: bool
    status: str
    company_id: str
    company_name: str
    role: str


class ChangePasswordResponse(BaseModel):
    message: str


class RequestPasswordResetResponse(BaseModel):
    """Response for request password reset use case"""

    status: str
    message: str


class ConfirmPasswordResetResponse(BaseModel):
    """Response for confirm password reset use case"""

    status: str
    message: str
