from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from iam_core.adapter.services.bcrypt_credential_verifier import BcryptCredentialVerifier
from tests.utils.clock import FixedClock


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 1, 15, 12, 0, 0))


@pytest.fixture(scope="session")
def verifier():
    # Low cost factor keeps the unit suite fast
    return BcryptCredentialVerifier(rounds=4)


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock(return_value=None)
    uow.users.get_by_id = AsyncMock(return_value=None)
    uow.users.update = AsyncMock(side_effect=lambda user: user)

    uow.companies = MagicMock()
    uow.companies.get_by_id = AsyncMock(return_value=None)

    uow.memberships = MagicMock()
    uow.memberships.get_by_user_id = AsyncMock(return_value=[])
    uow.memberships.get_by_user_and_company = AsyncMock(return_value=None)
    uow.memberships.revoke_all_by_user = AsyncMock(return_value=0)

    uow.login_tickets = MagicMock()
    uow.login_tickets.create = AsyncMock(side_effect=lambda ticket: ticket)
    uow.login_tickets.get_by_id = AsyncMock(return_value=None)
    uow.login_tickets.consume = AsyncMock(return_value=False)
    uow.login_tickets.delete_expired = AsyncMock(return_value=0)

    uow.refresh_tokens = MagicMock()
    uow.refresh_tokens.create = AsyncMock(side_effect=lambda token: token)
    uow.refresh_tokens.get_by_token_hash = AsyncMock(return_value=None)
    uow.refresh_tokens.revoke_by_id = AsyncMock(return_value=True)
    uow.refresh_tokens.revoke_all_by_user_id = AsyncMock(return_value=0)

    uow.password_resets = MagicMock()
    uow.password_resets.create = AsyncMock(side_effect=lambda request: request)
    uow.password_resets.get_by_token_hash = AsyncMock(return_value=None)
    uow.password_resets.mark_used = AsyncMock(return_value=True)
    uow.password_resets.mark_expired = AsyncMock(return_value=True)
    uow.password_resets.revoke_open_by_user_id = AsyncMock(return_value=0)
    uow.password_resets.expire_stale = AsyncMock(return_value=0)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    return uow
