from datetime import timedelta
from uuid import uuid4

import pytest

from iam_core.app.services.token_hashing import hash_token
from iam_core.app.use_cases.auth import ConfirmPasswordResetUseCase
from iam_core.domain.entities import PasswordResetRequest, ResetPasswordStatus, User


@pytest.fixture
def reset(mock_uow, verifier, clock):
    user = User(
        id=uuid4(),
        email="a@x.com",
        full_name="Alice",
        password_hash=verifier.hash("OldPass123!"),
    )
    request = PasswordResetRequest(
        id=uuid4(),
        user_id=user.id,
        token_hash=hash_token("reset-secret"),
        status=ResetPasswordStatus.requested,
        requested_at=clock.now(),
        expires_at=clock.now() + timedelta(hours=2),
    )
    mock_uow.password_resets.get_by_token_hash.return_value = request
    mock_uow.users.get_by_id.return_value = user
    return user, request


@pytest.mark.asyncio
async def test_successful_reset(mock_uow, verifier, clock, reset):
    user, request = reset
    mock_uow.refresh_tokens.revoke_all_by_user_id.return_value = 2

    result = await ConfirmPasswordResetUseCase(mock_uow, verifier, clock).execute(
        "reset-secret", "NewPass456!"
    )

    assert result.is_ok()
    assert result.value.status == "success"
    assert verifier.verify("NewPass456!", user.password_hash)
    mock_uow.password_resets.mark_used.assert_called_once_with(request.id, clock.now())
    mock_uow.refresh_tokens.revoke_all_by_user_id.assert_called_once_with(
        user.id, clock.now()
    )
    mock_uow.password_resets.revoke_open_by_user_id.assert_called_once_with(user.id)
    audit = mock_uow.audit_events.create.call_args.args[0]
    assert audit.action == "password_reset_confirmed"
    assert audit.event_metadata["refresh_tokens_revoked"] == 2
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_unknown_token(mock_uow, verifier, clock):
    result = await ConfirmPasswordResetUseCase(mock_uow, verifier, clock).execute(
        "nope", "NewPass456!"
    )

    assert result.error.code == "INVALID_RESET_TOKEN"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "status", [ResetPasswordStatus.used, ResetPasswordStatus.revoked]
)
async def test_used_or_revoked_token(mock_uow, verifier, clock, reset, status):
    _, request = reset
    request.status = status

    result = await ConfirmPasswordResetUseCase(mock_uow, verifier, clock).execute(
        "reset-secret", "NewPass456!"
    )

    assert result.error.code == "TOKEN_ALREADY_USED"
    mock_uow.password_resets.mark_used.assert_not_called()


@pytest.mark.asyncio
async def test_expired_token_is_marked_expired(mock_uow, verifier, clock, reset):
    user, request = reset
    old_hash = user.password_hash
    clock.advance(hours=3)

    result = await ConfirmPasswordResetUseCase(mock_uow, verifier, clock).execute(
        "reset-secret", "NewPass456!"
    )

    assert result.error.code == "TOKEN_EXPIRED"
    mock_uow.password_resets.mark_expired.assert_called_once_with(request.id)
    mock_uow.commit.assert_called_once()
    mock_uow.refresh_tokens.revoke_all_by_user_id.assert_not_called()
    assert user.password_hash == old_hash


@pytest.mark.asyncio
async def test_already_expired_status(mock_uow, verifier, clock, reset):
    _, request = reset
    request.status = ResetPasswordStatus.expired

    result = await ConfirmPasswordResetUseCase(mock_uow, verifier, clock).execute(
        "reset-secret", "NewPass456!"
    )

    assert result.error.code == "TOKEN_EXPIRED"


@pytest.mark.asyncio
async def test_concurrent_confirmation_loses(mock_uow, verifier, clock, reset):
    mock_uow.password_resets.mark_used.return_value = False

    result = await ConfirmPasswordResetUseCase(mock_uow, verifier, clock).execute(
        "reset-secret", "NewPass456!"
    )

    assert result.error.code == "TOKEN_ALREADY_USED"
    mock_uow.users.update.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_password_policy_checked_first(mock_uow, verifier, clock, reset):
    result = await ConfirmPasswordResetUseCase(mock_uow, verifier, clock).execute(
        "reset-secret", "short"
    )

    assert result.error.code == "INVALID_PASSWORD"
    mock_uow.password_resets.get_by_token_hash.assert_not_called()
