from datetime import timedelta

import pytest

from iam_core.app.services.login_ticket_service import LoginTicketService
from iam_core.domain.entities import LoginTicket


@pytest.mark.asyncio
async def test_issue_creates_opaque_short_lived_ticket(mock_uow, clock):
    service = LoginTicketService(mock_uow, clock, ttl_minutes=5)

    first = await service.issue("a@x.com")
    second = await service.issue("a@x.com")

    assert first.id != second.id
    assert len(first.id) >= 32
    assert first.expires_at == clock.now() + timedelta(minutes=5)
    assert first.used is False


@pytest.mark.asyncio
async def test_redeem_returns_consumed_ticket(mock_uow, clock):
    ticket = LoginTicket(
        id="t1", email="a@x.com", used=True, expires_at=clock.now() + timedelta(minutes=5)
    )
    mock_uow.login_tickets.consume.return_value = True
    mock_uow.login_tickets.get_by_id.return_value = ticket

    result = await LoginTicketService(mock_uow, clock).redeem("t1", "a@x.com")

    assert result.is_ok()
    assert result.value is ticket


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "used,expires_in,email",
    [
        (True, timedelta(minutes=5), "a@x.com"),
        (False, timedelta(minutes=-1), "a@x.com"),
        (False, timedelta(minutes=5), "b@x.com"),
    ],
)
async def test_redeem_rejects_with_one_error(mock_uow, clock, used, expires_in, email):
    mock_uow.login_tickets.consume.return_value = False
    mock_uow.login_tickets.get_by_id.return_value = LoginTicket(
        id="t1", email="a@x.com", used=used, expires_at=clock.now() + expires_in
    )

    result = await LoginTicketService(mock_uow, clock).redeem("t1", email)

    assert result.is_err()
    assert result.error.code == "INVALID_TICKET"
