"""
HTTP rate-limit gates.

RateLimit is a per-route dependency for sensitive operations (fail-closed
by default). RateLimitMiddleware is the global per-caller budget
(fail-open). Both key authenticated callers by user id and anonymous ones
by IP, and give allowlisted IPs a larger budget.
"""

import logging
from datetime import timedelta
from typing import Callable, Iterable, Optional

from fastapi import Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from config import ApplicationConfig
from iam_core.api.error import ClientError
from iam_core.api.utils.client_info import rate_limit_ip
from iam_core.api.utils.jwt import parse_jwt
from iam_core.app.errors import RATE_LIMIT_EXCEEDED, SERVICE_UNAVAILABLE
from iam_core.app.services.rate_limiter import (
    IpAllowlist,
    RateLimitDecision,
    RateLimiter,
    RateLimitRule,
    build_rate_limit_key,
)
from iam_core.depends import get_optional_claims, get_rate_limiter
from iam_core.domain.claims import AccessTokenClaims

logger = logging.getLogger(__name__)

DEFAULT_EXCLUDED_PATHS = ("/docs", "/redoc", "/openapi.json", "/health")


def _rate_limit_headers(decision: RateLimitDecision) -> dict:
    return {"Retry-After": str(max(1, decision.retry_after_seconds))}


class RateLimit:
    """
    Per-operation token bucket, used as a route dependency:

        @router.post("/login", dependencies=[Depends(RateLimit("login", 5, 10, 60))])
    """

    def __init__(
        self,
        operation: str,
        capacity: int,
        refill_tokens: int,
        refill_period_seconds: int,
        fail_open: bool = False,
        allowlist: Optional[IpAllowlist] = None,
        allowlist_factor: Optional[float] = None,
    ):
        self.operation = operation
        self.rule = RateLimitRule(
            capacity=capacity,
            refill_tokens=refill_tokens,
            refill_period=timedelta(seconds=refill_period_seconds),
            fail_open=fail_open,
        )
        self.allowlist = allowlist
        self.allowlist_factor = allowlist_factor

    async def __call__(
        self,
        request: Request,
        claims: Optional[AccessTokenClaims] = Depends(get_optional_claims),
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        if not ApplicationConfig.RATE_LIMIT_ENABLED:
            return

        ip = rate_limit_ip(request)
        user_id = str(claims.user_id) if claims else None
        key = build_rate_limit_key(self.operation, ip, user_id)
        decision = await limiter.check(key, self._rule_for(ip))
        if not decision.allowed and decision.degraded:
            raise ClientError(
                SERVICE_UNAVAILABLE, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
            )
        if not decision.allowed:
            raise ClientError(
                RATE_LIMIT_EXCEEDED,
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                headers=_rate_limit_headers(decision),
            )

    def _rule_for(self, ip: Optional[str]) -> RateLimitRule:
        allowlist = self.allowlist
        if allowlist is None:
            allowlist = IpAllowlist.from_setting(ApplicationConfig.RATE_LIMIT_WHITELIST)
        if ip not in allowlist:
            return self.rule
        factor = self.allowlist_factor or ApplicationConfig.RATE_LIMIT_WHITELIST_ROUTE_FACTOR
        return self.rule.scaled(factor)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Global budget per caller across all routes.

    limiter_provider is called per request so dependency overrides on
    get_rate_limiter also apply here.
    """

    def __init__(
        self,
        app,
        limiter_provider: Callable[[], RateLimiter],
        default_rule: RateLimitRule,
        allowlisted_rule: RateLimitRule,
        allowlist: IpAllowlist,
        excluded_paths: Iterable[str] = DEFAULT_EXCLUDED_PATHS,
        enabled: bool = True,
    ):
        super().__init__(app)
        self.limiter_provider = limiter_provider
        self.default_rule = default_rule
        self.allowlisted_rule = allowlisted_rule
        self.allowlist = allowlist
        self.excluded_paths = tuple(excluded_paths)
        self.enabled = enabled

    async def dispatch(self, request: Request, call_next):
        if not self.enabled or request.url.path.startswith(self.excluded_paths):
            return await call_next(request)

        ip = rate_limit_ip(request)
        key = build_rate_limit_key("global", ip, self._user_id(request))
        rule = self.allowlisted_rule if ip in self.allowlist else self.default_rule

        decision = await self.limiter_provider().check(key, rule)
        if not decision.allowed:
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "error": {
                        "code": RATE_LIMIT_EXCEEDED.code,
                        "message": RATE_LIMIT_EXCEEDED.message,
                    }
                },
                headers=_rate_limit_headers(decision),
            )

        response = await call_next(request)
        if not decision.degraded:
            response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response

    @staticmethod
    def _user_id(request: Request) -> Optional[str]:
        authorization = request.headers.get("authorization", "")
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None
        claims = parse_jwt(token)
        return str(claims.user_id) if claims else None


def global_rules() -> tuple[RateLimitRule, RateLimitRule]:
    period = timedelta(seconds=ApplicationConfig.RATE_LIMIT_PERIOD_SECONDS)
    default_rule = RateLimitRule(
        capacity=ApplicationConfig.RATE_LIMIT_DEFAULT_CAPACITY,
        refill_tokens=ApplicationConfig.RATE_LIMIT_DEFAULT_REFILL,
        refill_period=period,
        fail_open=True,
    )
    allowlisted_rule = RateLimitRule(
        capacity=ApplicationConfig.RATE_LIMIT_WHITELIST_CAPACITY,
        refill_tokens=ApplicationConfig.RATE_LIMIT_WHITELIST_REFILL,
        refill_period=period,
        fail_open=True,
    )
    return default_rule, allowlisted_rule
