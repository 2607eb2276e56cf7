from iam_core.app.errors import AuthErrorCode
from iam_core.libs.result import Error, Result, Return

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72  # bcrypt ignores anything past 72 bytes


def validate_password(password: str) -> Result[None]:
    """
    Validate password complexity.

    Args:
        password: Password to validate

    Returns:
        Result with None if valid, or Error if invalid
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        return Return.err(
            Error(
                AuthErrorCode.INVALID_PASSWORD.value,
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            )
        )

    if len(password.encode()) > MAX_PASSWORD_BYTES:
        return Return.err(
            Error(
                AuthErrorCode.INVALID_PASSWORD.value,
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
            )
        )

    return Return.ok(None)
