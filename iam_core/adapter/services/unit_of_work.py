from sqlmodel.ext.asyncio.session import AsyncSession

from iam_core.adapter.repositories.audit_event_repository import AuditEventRepository
from iam_core.adapter.repositories.company_repository import CompanyRepository
from iam_core.adapter.repositories.login_ticket_repository import LoginTicketRepository
from iam_core.adapter.repositories.membership_repository import UserCompanyRepository
from iam_core.adapter.repositories.password_reset_repository import PasswordResetRepository
from iam_core.adapter.repositories.refresh_token_repository import RefreshTokenRepository
from iam_core.adapter.repositories.user_repository import UserRepository
from iam_core.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """SQLAlchemy implementation of UnitOfWork pattern"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def __aenter__(self):
        # Initialize all repositories with the session
        self.users = UserRepository(self.session)
        self.companies = CompanyRepository(self.session)
        self.memberships = UserCompanyRepository(self.session)
        self.login_tickets = LoginTicketRepository(self.session)
        self.refresh_tokens = RefreshTokenRepository(self.session)
        self.password_resets = PasswordResetRepository(self.session)
        self.audit_events = AuditEventRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Anything not committed explicitly is discarded
        await self.rollback()

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
