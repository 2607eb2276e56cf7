from abc import ABC, abstractmethod
from datetime import datetime

from iam_core.domain.base import utc_now


class ClockSource(ABC):
    """Time source for every expiry decision, injectable for tests"""

    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(ClockSource):
    def now(self) -> datetime:
        return utc_now()
