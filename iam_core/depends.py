from typing import Optional

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from iam_core.adapter.services.bcrypt_credential_verifier import BcryptCredentialVerifier
from iam_core.adapter.services.email_notifier import LoggingEmailNotifier, SmtpEmailNotifier
from iam_core.adapter.services.memory_rate_limit_store import InMemoryRateLimitStore
from iam_core.adapter.services.redis_rate_limit_store import RedisRateLimitStore
from iam_core.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from iam_core.api.error import ClientError
from iam_core.api.utils.jwt import parse_jwt
from iam_core.app.errors import AuthErrorCode
from iam_core.app.services.clock import ClockSource, SystemClock
from iam_core.app.services.credential_verifier import ICredentialVerifier
from iam_core.app.services.email_notifier import IEmailNotifier
from iam_core.app.services.rate_limit_store import IRateLimitStore
from iam_core.app.services.rate_limiter import RateLimiter
from iam_core.domain.claims import AccessTokenClaims
from iam_core.libs.result import Error

engine = create_async_engine(
    ApplicationConfig.DB_URI,
    echo=False,
    future=True,
    pool_timeout=ApplicationConfig.DB_POOL_TIMEOUT_SECONDS,
    connect_args=ApplicationConfig.DB_CONNECT_ARGS,
)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)

_clock = SystemClock()
_verifier = BcryptCredentialVerifier(rounds=ApplicationConfig.BCRYPT_ROUNDS)
_rate_limiter: Optional[RateLimiter] = None


async def get_session() -> AsyncSession:
    async with AsyncSessionLocal() as session:
        yield session


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_clock() -> ClockSource:
    return _clock


def get_credential_verifier() -> ICredentialVerifier:
    return _verifier


def get_email_notifier() -> IEmailNotifier:
    if ApplicationConfig.SMTP_HOST:
        return SmtpEmailNotifier(
            host=ApplicationConfig.SMTP_HOST,
            port=ApplicationConfig.SMTP_PORT,
            username=ApplicationConfig.SMTP_USERNAME,
            password=ApplicationConfig.SMTP_PASSWORD,
            sender=ApplicationConfig.SMTP_FROM,
        )
    return LoggingEmailNotifier()


def build_rate_limit_store() -> IRateLimitStore:
    if ApplicationConfig.CACHE_BACKEND == "memory":
        return InMemoryRateLimitStore()
    return RedisRateLimitStore(
        ApplicationConfig.REDIS_URL,
        socket_timeout=ApplicationConfig.REDIS_TIMEOUT_SECONDS,
    )


def get_rate_limiter() -> RateLimiter:
    """Process-wide limiter; buckets themselves live in the shared store"""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter(
            build_rate_limit_store(),
            timeout_seconds=ApplicationConfig.RATE_LIMIT_STORE_TIMEOUT_SECONDS,
        )
    return _rate_limiter


async def close_rate_limiter():
    global _rate_limiter
    if _rate_limiter is not None:
        await _rate_limiter.store.close()
        _rate_limiter = None


async def get_optional_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[AccessTokenClaims]:
    """Verified claims, or None for anonymous callers and unusable tokens"""
    if credentials is None:
        return None
    return parse_jwt(credentials.credentials)


async def get_current_claims(
    claims: Optional[AccessTokenClaims] = Depends(get_optional_claims),
) -> AccessTokenClaims:
    """
    Dependency to extract and verify the JWT from the Authorization header.

    Returns:
        Typed access token claims

    Raises:
        ClientError: 401 if the token is missing, invalid or expired
    """
    if claims is None:
        raise ClientError(
            Error(AuthErrorCode.INVALID_CREDENTIALS.value, "Invalid or expired token"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return claims
