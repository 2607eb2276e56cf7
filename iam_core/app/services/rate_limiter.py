"""
Distributed token-bucket rate limiter.

Business code never talks to the shared store; it goes through
RateLimiter.try_consume, which returns a decision value. A declined request
is an ordinary outcome, not an exception.
"""

import asyncio
import functools
import hashlib
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable, Iterable, Optional, TypeVar

from iam_core.app.errors import RATE_LIMIT_EXCEEDED, SERVICE_UNAVAILABLE
from iam_core.app.services.rate_limit_store import IRateLimitStore, RateLimitStoreUnavailable
from iam_core.libs.result import Result, Return

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int = 0
    retry_after_seconds: int = 0
    degraded: bool = False  # decided by fail policy because the store was unavailable


@dataclass(frozen=True)
class RateLimitRule:
    """Budget for one logical operation"""

    capacity: int
    refill_tokens: int
    refill_period: timedelta
    fail_open: bool = False

    def scaled(self, factor: float) -> "RateLimitRule":
        return RateLimitRule(
            capacity=max(1, int(self.capacity * factor)),
            refill_tokens=max(1, int(self.refill_tokens * factor)),
            refill_period=self.refill_period,
            fail_open=self.fail_open,
        )


def build_rate_limit_key(
    operation: str, client_ip: Optional[str], user_id: Optional[str] = None
) -> str:
    """
    Key a bucket by operation and caller.

    Authenticated callers are keyed by user id, anonymous ones by IP.
    """
    if user_id:
        return f"{operation}:user:{user_id}"
    return f"{operation}:ip:{client_ip or 'unknown'}"


def normalize_rate_key(key: str) -> str:
    """Hash the logical key so caller-controlled parts cannot collide on delimiters"""
    return "rate:" + hashlib.sha256(key.encode()).hexdigest()


class IpAllowlist:
    def __init__(self, entries: Iterable[str]):
        self._ips = frozenset(e.strip() for e in entries if e and e.strip())

    @classmethod
    def from_setting(cls, value) -> "IpAllowlist":
        if isinstance(value, str):
            value = value.split(",")
        return cls(value or [])

    def __contains__(self, ip: Optional[str]) -> bool:
        return ip is not None and ip in self._ips

    def __len__(self) -> int:
        return len(self._ips)


class RateLimiter:
    """
    Atomic consume of one token from the bucket named by key.

    Business Rules:
    - Buckets are created full on first use with the given parameters
    - Refill is greedy: refill_tokens spread evenly over refill_period
    - Store calls are bounded by timeout_seconds
    - On store failure the rule's fail policy decides (fail_open=False rejects)
    """

    def __init__(self, store: IRateLimitStore, timeout_seconds: float = 0.5):
        self.store = store
        self.timeout_seconds = timeout_seconds

    async def try_consume(
        self,
        key: str,
        capacity: int,
        refill_tokens: int,
        refill_period: timedelta,
        *,
        fail_open: bool = False,
    ) -> RateLimitDecision:
        if capacity <= 0 or refill_tokens <= 0:
            raise ValueError("capacity and refill_tokens must be positive")
        period_ms = int(refill_period.total_seconds() * 1000)
        if period_ms <= 0:
            raise ValueError("refill_period must be positive")

        try:
            state = await asyncio.wait_for(
                self.store.consume(
                    normalize_rate_key(key), capacity, refill_tokens, period_ms
                ),
                timeout=self.timeout_seconds,
            )
        except (RateLimitStoreUnavailable, asyncio.TimeoutError) as exc:
            logger.warning(
                "Rate limit store unavailable for key=%s, failing %s: %s",
                key,
                "open" if fail_open else "closed",
                exc,
            )
            return RateLimitDecision(allowed=fail_open, degraded=True)

        if not state.allowed:
            logger.warning("Rate limit exceeded for key=%s", key)
        return RateLimitDecision(
            allowed=state.allowed,
            remaining=state.remaining,
            retry_after_seconds=state.retry_after_seconds,
        )

    async def check(self, key: str, rule: RateLimitRule) -> RateLimitDecision:
        return await self.try_consume(
            key,
            rule.capacity,
            rule.refill_tokens,
            rule.refill_period,
            fail_open=rule.fail_open,
        )


def rate_limited(
    limiter: RateLimiter,
    key_func: Callable[..., str],
    rule: RateLimitRule,
):
    """
    Gate an async callable returning a Result.

    key_func receives the same arguments as the wrapped callable. When the
    bucket is empty the callable is not invoked and RATE_LIMIT_EXCEEDED is
    returned as an error result. A store outage on a fail-closed rule returns
    SERVICE_UNAVAILABLE instead.
    """

    def decorator(func: Callable[..., Awaitable[Result[T]]]):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Result[T]:
            decision = await limiter.check(key_func(*args, **kwargs), rule)
            if not decision.allowed and decision.degraded:
                return Return.err(SERVICE_UNAVAILABLE)
            if not decision.allowed:
                return Return.err(RATE_LIMIT_EXCEEDED)
            return await func(*args, **kwargs)

        return wrapper

    return decorator
