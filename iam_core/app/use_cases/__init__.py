"""
Use Cases

Organized into domain folders:
- auth/: Authentication flows
- maintenance/: Housekeeping
"""

from .auth import (
    ChangePasswordUseCase,
    ConfirmPasswordResetUseCase,
    LoginWithCompanyUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    RequestPasswordResetUseCase,
    RequestTicketUseCase,
    WhoamiUseCase,
)
from .maintenance import PurgeExpiredUseCase

__all__ = [
    # Auth
    "RequestTicketUseCase",
    "LoginWithCompanyUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "WhoamiUseCase",
    "ChangePasswordUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    # Maintenance
    "PurgeExpiredUseCase",
]
