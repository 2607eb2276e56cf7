from datetime import datetime
from typing import Optional

from sqlalchemy import delete, func
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from iam_core.app.repositories.login_ticket_repository import ILoginTicketRepository
from iam_core.domain.entities import LoginTicket


class LoginTicketRepository(ILoginTicketRepository):
    """LoginTicket repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, ticket: LoginTicket) -> LoginTicket:
        """Create a new login ticket"""
        self.session.add(ticket)
        await self.session.flush()
        await self.session.refresh(ticket)
        return ticket

    async def get_by_id(self, ticket_id: str) -> Optional[LoginTicket]:
        """Get ticket by ID, always reloading state written by conditional updates"""
        stmt = (
            select(LoginTicket)
            .where(LoginTicket.id == ticket_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def consume(self, ticket_id: str, email: str, now: datetime) -> bool:
        """
        Mark ticket used in a single conditional UPDATE.

        No read precedes the write, so concurrent redeemers serialize on the
        row and only the first one matches used == False.
        """
        stmt = (
            update(LoginTicket)
            .where(
                LoginTicket.id == ticket_id,
                LoginTicket.used == False,  # noqa: E712
                LoginTicket.expires_at > now,
                func.lower(LoginTicket.email) == email.lower(),
            )
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def delete_expired(self, now: datetime) -> int:
        """Delete tickets past their expiry"""
        stmt = (
            delete(LoginTicket)
            .where(LoginTicket.expires_at <= now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
