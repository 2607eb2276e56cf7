from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt
from pydantic import ValidationError

from config import ApplicationConfig
from iam_core.domain.claims import AccessTokenClaims

ALGORITHM = "HS256"


def generate_jwt(
    user_id: UUID,
    email: str,
    company_id: UUID,
    role: str,
    now: Optional[datetime] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Generate a company-scoped JWT access token

    Args:
        user_id: User UUID (sub claim)
        email: User email
        company_id: Company selected at login
        role: Role of the user in that company
        now: Issue time, naive UTC or aware; defaults to the current time
        expires_delta: Lifetime, defaults to JWT_ACCESS_TOKEN_MINUTES

    Returns:
        JWT token string (HS256)
    """
    if now is None:
        now = datetime.now(UTC)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=ApplicationConfig.JWT_ACCESS_TOKEN_MINUTES)

    payload = {
        "sub": str(user_id),
        "email": email,
        "companyId": str(company_id),
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(payload, ApplicationConfig.JWT_SECRET, algorithm=ALGORITHM)


def parse_jwt(token: str) -> Optional[AccessTokenClaims]:
    """
    Verify and decode a JWT access token

    Args:
        token: JWT token string

    Returns:
        Typed claims, or None if the signature, expiry or claim set is invalid
    """
    try:
        payload = jwt.decode(token, ApplicationConfig.JWT_SECRET, algorithms=[ALGORITHM])
        return AccessTokenClaims.model_validate(payload)
    except (JWTError, ValidationError):
        return None
