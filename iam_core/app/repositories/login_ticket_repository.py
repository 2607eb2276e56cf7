from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from iam_core.domain.entities import LoginTicket


class ILoginTicketRepository(ABC):
    """LoginTicket repository interface - application layer"""

    @abstractmethod
    async def create(self, ticket: LoginTicket) -> LoginTicket:
        """Persist a new ticket"""
        pass

    @abstractmethod
    async def get_by_id(self, ticket_id: str) -> Optional[LoginTicket]:
        """Get ticket by ID"""
        pass

    @abstractmethod
    async def consume(self, ticket_id: str, email: str, now: datetime) -> bool:
        """
        Mark the ticket used if it is unused, unexpired and bound to email.

        Single conditional update. Returns True only for the one caller
        whose update matched the row.
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete tickets past their expiry. Returns count."""
        pass
