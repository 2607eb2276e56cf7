from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class BucketState:
    """Outcome of one atomic consume against a token bucket"""

    allowed: bool
    remaining: int
    retry_after_seconds: int


class RateLimitStoreUnavailable(Exception):
    """The shared store could not be reached or answered too late"""


class IRateLimitStore(ABC):
    """
    Shared key-value store holding token buckets.

    consume() must refill and decrement as one atomic step for every
    instance sharing the store.
    """

    @abstractmethod
    async def consume(
        self,
        key: str,
        capacity: int,
        refill_tokens: int,
        refill_period_ms: int,
        cost: int = 1,
    ) -> BucketState:
        pass

    async def close(self) -> None:
        pass
