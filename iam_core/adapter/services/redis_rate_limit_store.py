import math

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from iam_core.app.services.rate_limit_store import (
    BucketState,
    IRateLimitStore,
    RateLimitStoreUnavailable,
)


class RedisRateLimitStore(IRateLimitStore):
    """
    Token buckets in Redis, shared by every service instance.

    Refill and consume run in one Lua script, so the read-modify-write of a
    bucket is atomic on the server. The script reads Redis TIME, which gives
    all instances the same clock.
    """

    _TOKEN_BUCKET_SCRIPT = """
local key = KEYS[1]
local capacity = tonumber(ARGV[1])
local refill_tokens = tonumber(ARGV[2])
local period_ms = tonumber(ARGV[3])
local cost = tonumber(ARGV[4])

local t = redis.call('TIME')
local now = tonumber(t[1]) * 1000 + math.floor(tonumber(t[2]) / 1000)

local data = redis.call('HMGET', key, 'tokens', 'ts')
local tokens = tonumber(data[1])
local last = tonumber(data[2])

if tokens == nil or last == nil then
  tokens = capacity
  last = now
end

local rate = refill_tokens / period_ms
tokens = math.min(capacity, tokens + math.max(0, now - last) * rate)

local allowed = 0
local retry_ms = 0
if tokens >= cost then
  tokens = tokens - cost
  allowed = 1
else
  retry_ms = math.ceil((cost - tokens) / rate)
end

redis.call('HSET', key, 'tokens', tostring(tokens), 'ts', now)
local ttl_ms = math.ceil((capacity - tokens) / rate)
redis.call('PEXPIRE', key, math.max(ttl_ms, 1000))
return {allowed, math.floor(tokens), retry_ms}
"""

    def __init__(self, redis_url: str, *, socket_timeout: float = 0.5):
        self.redis_url = redis_url
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self._token_bucket = self.client.register_script(self._TOKEN_BUCKET_SCRIPT)

    async def consume(
        self,
        key: str,
        capacity: int,
        refill_tokens: int,
        refill_period_ms: int,
        cost: int = 1,
    ) -> BucketState:
        try:
            allowed, remaining, retry_ms = await self._token_bucket(
                keys=[key],
                args=[capacity, refill_tokens, refill_period_ms, max(1, cost)],
            )
        except (RedisError, OSError) as exc:
            raise RateLimitStoreUnavailable(str(exc)) from exc

        return BucketState(
            allowed=bool(int(allowed)),
            remaining=max(0, int(remaining)),
            retry_after_seconds=math.ceil(int(retry_ms) / 1000),
        )

    async def close(self) -> None:
        await self.client.aclose()
