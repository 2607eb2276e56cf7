from abc import ABC, abstractmethod

from iam_core.app.repositories.audit_event_repository import IAuditEventRepository
from iam_core.app.repositories.company_repository import ICompanyRepository
from iam_core.app.repositories.login_ticket_repository import ILoginTicketRepository
from iam_core.app.repositories.membership_repository import IUserCompanyRepository
from iam_core.app.repositories.password_reset_repository import IPasswordResetRepository
from iam_core.app.repositories.refresh_token_repository import IRefreshTokenRepository
from iam_core.app.repositories.user_repository import IUserRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    users: IUserRepository
    companies: ICompanyRepository
    memberships: IUserCompanyRepository
    login_tickets: ILoginTicketRepository
    refresh_tokens: IRefreshTokenRepository
    password_resets: IPasswordResetRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
