"""
Error catalogue for authentication outcomes.

Callers get one of these codes and nothing more; the internal reason behind
a rejection only goes to logs and audit events.
"""

from enum import Enum

from iam_core.libs.result import Error


class AuthErrorCode(str, Enum):
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TICKET = "INVALID_TICKET"
    INVALID_REFRESH_TOKEN = "INVALID_REFRESH_TOKEN"
    REVOKED_OR_EXPIRED_TOKEN = "REVOKED_OR_EXPIRED_TOKEN"
    INVALID_RESET_TOKEN = "INVALID_RESET_TOKEN"
    TOKEN_ALREADY_USED = "TOKEN_ALREADY_USED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


INVALID_CREDENTIALS = Error(AuthErrorCode.INVALID_CREDENTIALS.value, "Invalid credentials")
INVALID_TICKET = Error(AuthErrorCode.INVALID_TICKET.value, "Invalid login ticket")
INVALID_REFRESH_TOKEN = Error(
    AuthErrorCode.INVALID_REFRESH_TOKEN.value, "Invalid refresh token"
)
REVOKED_OR_EXPIRED_TOKEN = Error(
    AuthErrorCode.REVOKED_OR_EXPIRED_TOKEN.value, "Refresh token expired or revoked"
)
INVALID_RESET_TOKEN = Error(
    AuthErrorCode.INVALID_RESET_TOKEN.value, "Invalid password reset token"
)
TOKEN_ALREADY_USED = Error(
    AuthErrorCode.TOKEN_ALREADY_USED.value, "Password reset token already used or revoked"
)
TOKEN_EXPIRED = Error(AuthErrorCode.TOKEN_EXPIRED.value, "Password reset token expired")
RATE_LIMIT_EXCEEDED = Error(AuthErrorCode.RATE_LIMIT_EXCEEDED.value, "Too many requests")
SERVICE_UNAVAILABLE = Error(
    AuthErrorCode.SERVICE_UNAVAILABLE.value, "Service temporarily unavailable"
)
