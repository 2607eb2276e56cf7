from uuid import uuid4
from unittest.mock import AsyncMock, MagicMock

import pytest

from iam_core.app.services.email_notifier import EmailDeliveryError
from iam_core.app.services.token_hashing import hash_token
from iam_core.app.use_cases.auth import RequestPasswordResetUseCase
from iam_core.domain.entities import ResetPasswordStatus, User


@pytest.fixture
def notifier():
    notifier = MagicMock()
    notifier.send = AsyncMock()
    return notifier


def sent_token(notifier) -> str:
    body = notifier.send.call_args.args[2]
    return body.split("token=")[1].split()[0]


@pytest.mark.asyncio
async def test_existing_user_gets_hashed_request_and_email(mock_uow, notifier, clock):
    user = User(id=uuid4(), email="a@x.com", full_name="Alice", password_hash="x")
    mock_uow.users.get_by_email.return_value = user

    use_case = RequestPasswordResetUseCase(
        mock_uow, notifier, clock, reset_url="https://app.test/reset?token={token}"
    )
    result = await use_case.execute("a@x.com")

    assert result.is_ok()
    assert result.value.status == "sent"

    request = mock_uow.password_resets.create.call_args.args[0]
    assert request.status == ResetPasswordStatus.requested
    assert request.expires_at - request.requested_at == use_case.ttl
    mock_uow.password_resets.revoke_open_by_user_id.assert_called_once_with(user.id)
    mock_uow.commit.assert_called_once()

    assert notifier.send.call_args.args[0] == "a@x.com"
    token = sent_token(notifier)
    assert request.token_hash == hash_token(token)
    assert token != request.token_hash


@pytest.mark.asyncio
async def test_unknown_email_gets_same_response(mock_uow, notifier, clock):
    use_case = RequestPasswordResetUseCase(mock_uow, notifier, clock)

    unknown = await use_case.execute("nobody@x.com")

    mock_uow.users.get_by_email.return_value = User(
        id=uuid4(), email="a@x.com", password_hash="x"
    )
    known = await use_case.execute("a@x.com")

    assert unknown.value == known.value
    assert notifier.send.call_count == 1


@pytest.mark.asyncio
async def test_delivery_failure_is_not_propagated(mock_uow, notifier, clock):
    mock_uow.users.get_by_email.return_value = User(
        id=uuid4(), email="a@x.com", password_hash="x"
    )
    notifier.send.side_effect = EmailDeliveryError("smtp down")

    result = await RequestPasswordResetUseCase(mock_uow, notifier, clock).execute(
        "a@x.com"
    )

    assert result.is_ok()
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_email_is_scheduled_instead_of_sent_inline(mock_uow, notifier, clock):
    mock_uow.users.get_by_email.return_value = User(
        id=uuid4(), email="a@x.com", password_hash="x"
    )
    scheduled = []

    use_case = RequestPasswordResetUseCase(
        mock_uow, notifier, clock, schedule=lambda fn, *args: scheduled.append((fn, args))
    )
    result = await use_case.execute("a@x.com")

    assert result.is_ok()
    notifier.send.assert_not_called()
    assert len(scheduled) == 1

    fn, args = scheduled[0]
    await fn(*args)
    assert notifier.send.call_args.args[0] == "a@x.com"


@pytest.mark.asyncio
async def test_unknown_email_schedules_nothing(mock_uow, notifier, clock):
    scheduled = []

    use_case = RequestPasswordResetUseCase(
        mock_uow, notifier, clock, schedule=lambda fn, *args: scheduled.append(fn)
    )
    await use_case.execute("nobody@x.com")

    assert scheduled == []


@pytest.mark.asyncio
async def test_unexpected_delivery_error_is_logged_not_raised(mock_uow, notifier, clock):
    notifier.send.side_effect = ConnectionResetError("peer went away")
    use_case = RequestPasswordResetUseCase(mock_uow, notifier, clock)

    await use_case.deliver("a@x.com", "token-value")

    notifier.send.assert_called_once()
