from datetime import timedelta
from uuid import UUID

import pytest

from iam_core.adapter.repositories.login_ticket_repository import LoginTicketRepository
from iam_core.adapter.repositories.membership_repository import UserCompanyRepository
from iam_core.adapter.repositories.password_reset_repository import PasswordResetRepository
from iam_core.adapter.repositories.refresh_token_repository import RefreshTokenRepository
from iam_core.adapter.repositories.user_repository import UserRepository
from iam_core.domain.base import utc_now
from iam_core.domain.entities import (
    LoginTicket,
    MembershipStatus,
    PasswordResetRequest,
    RefreshToken,
    ResetPasswordStatus,
)


@pytest.mark.asyncio
async def test_ticket_consume_is_conditional(db_session):
    repo = LoginTicketRepository(db_session)
    now = utc_now()
    await repo.create(
        LoginTicket(id="t1", email="a@x.com", expires_at=now + timedelta(minutes=5))
    )

    assert await repo.consume("t1", "b@x.com", now) is False
    assert await repo.consume("t1", "A@X.COM", now) is True
    assert await repo.consume("t1", "a@x.com", now) is False
    assert (await repo.get_by_id("t1")).used is True


@pytest.mark.asyncio
async def test_expired_ticket_cannot_be_consumed(db_session):
    repo = LoginTicketRepository(db_session)
    now = utc_now()
    await repo.create(
        LoginTicket(id="t2", email="a@x.com", expires_at=now - timedelta(seconds=1))
    )

    assert await repo.consume("t2", "a@x.com", now) is False


@pytest.mark.asyncio
async def test_membership_revoke_all_by_user(db_session, alice):
    repo = UserCompanyRepository(db_session)

    revoked = await repo.revoke_all_by_user(UUID(alice.user_id))

    # C3 was already blocked
    assert revoked == 2
    memberships = await repo.get_by_user_id(UUID(alice.user_id))
    assert {m.status for m in memberships} == {
        MembershipStatus.disabled,
        MembershipStatus.blocked,
    }


@pytest.mark.asyncio
async def test_refresh_token_revocation(db_session, alice):
    repo = RefreshTokenRepository(db_session)
    user_id = UUID(alice.user_id)
    company_id = UUID(alice.company_id("C1"))
    now = utc_now()
    for i in range(3):
        await repo.create(
            RefreshToken(
                user_id=user_id,
                company_id=company_id,
                token_hash=f"{i:064d}",
                expires_at=now + timedelta(days=30),
            )
        )
    first = await repo.get_by_token_hash(f"{0:064d}")

    assert await repo.revoke_by_id(first.id, now) is True
    assert await repo.revoke_by_id(first.id, now) is False
    assert await repo.revoke_all_by_user_id(user_id, now) == 2
    assert await repo.count_active_by_user_id(user_id, now) == 0
    reloaded = await repo.get_by_token_hash(f"{0:064d}")
    assert reloaded.revoked is True
    assert reloaded.revoked_at is not None


@pytest.mark.asyncio
async def test_reset_request_transitions(db_session, bob):
    repo = PasswordResetRepository(db_session)
    now = utc_now()
    request = await repo.create(
        PasswordResetRequest(
            user_id=UUID(bob.user_id),
            token_hash="b" * 64,
            status=ResetPasswordStatus.requested,
            expires_at=now + timedelta(hours=2),
        )
    )

    assert await repo.mark_used(request.id, now) is True
    assert await repo.mark_used(request.id, now) is False
    assert await repo.mark_expired(request.id) is False
    reloaded = await repo.get_by_token_hash("b" * 64)
    assert reloaded.status == ResetPasswordStatus.used
    assert reloaded.used_at == now


@pytest.mark.asyncio
async def test_user_lookup_ignores_email_case(db_session, alice):
    user = await UserRepository(db_session).get_by_email("A@X.COM")

    assert str(user.id) == alice.user_id
