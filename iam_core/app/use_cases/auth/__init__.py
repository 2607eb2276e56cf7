"""
Authentication Use Cases

All authentication-related business logic.
"""

from .request_ticket_use_case import RequestTicketUseCase
from .login_with_company_use_case import LoginWithCompanyUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutUseCase
from .whoami_use_case import WhoamiUseCase
from .change_password_use_case import ChangePasswordUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .password_policy import validate_password
from .dtos import (
    AssociatedCompanies,
    ChangePasswordResponse,
    ClientContext,
    CompanySummary,
    ConfirmPasswordResetResponse,
    LoginResponse,
    LogoutResponse,
    RefreshTokenResponse,
    RequestPasswordResetResponse,
    UserInfo,
    WhoamiResponse,
)

__all__ = [
    # Use Cases
    "RequestTicketUseCase",
    "LoginWithCompanyUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "WhoamiUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "validate_password",
    # DTOs - Commands
    "ClientContext",
    # DTOs - Responses
    "AssociatedCompanies",
    "LoginResponse",
    "RefreshTokenResponse",
    "LogoutResponse",
    "WhoamiResponse",
    "ChangePasswordResponse",
    "RequestPasswordResetResponse",
    "ConfirmPasswordResetResponse",
    # DTOs - Nested Models
    "UserInfo",
    "CompanySummary",
]
