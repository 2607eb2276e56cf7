import asyncio
import math
import time
from typing import Callable, Dict, Tuple

from iam_core.app.services.rate_limit_store import BucketState, IRateLimitStore


class InMemoryRateLimitStore(IRateLimitStore):
    """
    Process-local token buckets.

    Same arithmetic as the Redis script, guarded by one asyncio lock. Only
    enforces a per-process budget; used for development and tests.

    A bucket that has refilled to capacity is indistinguishable from a new
    one, so it is dropped on the next sweep (the Redis PEXPIRE equivalent).
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sweep_interval_seconds: float = 60.0,
    ):
        self._clock = clock
        # key -> (tokens, last refill ms, full at ms)
        self._buckets: Dict[str, Tuple[float, float, float]] = {}
        self._lock = asyncio.Lock()
        self._sweep_interval_ms = sweep_interval_seconds * 1000
        self._next_sweep_ms = 0.0

    async def consume(
        self,
        key: str,
        capacity: int,
        refill_tokens: int,
        refill_period_ms: int,
        cost: int = 1,
    ) -> BucketState:
        rate = refill_tokens / refill_period_ms  # tokens per ms
        async with self._lock:
            now = self._clock() * 1000
            self._sweep(now)

            tokens, last, _ = self._buckets.get(key, (float(capacity), now, now))
            tokens = min(float(capacity), tokens + max(0.0, now - last) * rate)

            allowed = tokens >= cost
            if allowed:
                tokens -= cost
            full_at = now + (capacity - tokens) / rate
            self._buckets[key] = (tokens, now, full_at)

            if allowed:
                return BucketState(allowed=True, remaining=int(tokens), retry_after_seconds=0)

            retry_ms = math.ceil((cost - tokens) / rate)
            return BucketState(
                allowed=False,
                remaining=int(tokens),
                retry_after_seconds=math.ceil(retry_ms / 1000),
            )

    def _sweep(self, now: float) -> None:
        if now < self._next_sweep_ms:
            return
        self._next_sweep_ms = now + self._sweep_interval_ms
        expired = [key for key, (_, _, full_at) in self._buckets.items() if full_at <= now]
        for key in expired:
            del self._buckets[key]

    def __len__(self) -> int:
        return len(self._buckets)

    def reset(self) -> None:
        self._buckets.clear()
