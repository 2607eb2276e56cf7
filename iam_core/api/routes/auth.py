from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, status
from pydantic import BaseModel, EmailStr, Field

from iam_core.api.error import raise_for_error
from iam_core.api.utils.client_info import get_client_context
from iam_core.api.utils.rate_limit import RateLimit
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.credential_verifier import ICredentialVerifier
from iam_core.app.services.email_notifier import IEmailNotifier
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.app.use_cases.auth import (
    AssociatedCompanies,
    ChangePasswordResponse,
    ChangePasswordUseCase,
    ClientContext,
    ConfirmPasswordResetResponse,
    ConfirmPasswordResetUseCase,
    LoginResponse,
    LoginWithCompanyUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    RequestPasswordResetResponse,
    RequestPasswordResetUseCase,
    RequestTicketUseCase,
    WhoamiResponse,
    WhoamiUseCase,
)
from iam_core.depends import (
    get_clock,
    get_credential_verifier,
    get_current_claims,
    get_email_notifier,
    get_unit_of_work,
)
from iam_core.domain.claims import AccessTokenClaims

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming credential step request.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=AssociatedCompanies,
    dependencies=[Depends(RateLimit("request-ticket", 5, 10, 60))],
)
async def login(
    request: LoginRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    verifier: ICredentialVerifier = Depends(get_credential_verifier),
    clock: ClockSource = Depends(get_clock),
    client: ClientContext = Depends(get_client_context),
):
    """
    User Login, step one

    Verifies credentials and returns the companies the user can enter plus
    a single-use login ticket.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 429 Too Many Requests: RATE_LIMIT_EXCEEDED
    """
    use_case = RequestTicketUseCase(uow, verifier, clock)
    result = await use_case.execute(request.email, request.password, client)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class LoginWithCompanyRequest(BaseModel):
    email: EmailStr = Field(..., description="Email the ticket was issued to")
    company_id: UUID = Field(..., description="Selected company")
    login_ticket: str = Field(..., min_length=1, description="Ticket from /auth/login")


@router.post(
    "/login-with-company",
    status_code=status.HTTP_200_OK,
    response_model=LoginResponse,
    dependencies=[Depends(RateLimit("login-with-company", 5, 10, 60))],
)
async def login_with_company(
    request: LoginWithCompanyRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: ClockSource = Depends(get_clock),
    client: ClientContext = Depends(get_client_context),
):
    """
    User Login, step two

    Redeems the login ticket for the chosen company and returns a
    company-scoped access token and a refresh token.

    Raises:
        - 401 Unauthorized: INVALID_TICKET, INVALID_CREDENTIALS
        - 429 Too Many Requests: RATE_LIMIT_EXCEEDED
    """
    use_case = LoginWithCompanyUseCase(uow, clock)
    result = await use_case.execute(
        request.email, request.company_id, request.login_ticket, client
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class RefreshRequest(BaseModel):
    """
    Refresh token HTTP request payload

    Validates incoming refresh request.
    """

    refresh_token: str = Field(..., min_length=1, description="Refresh token")


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=RefreshTokenResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(RateLimit("refresh", 10, 10, 60))],
)
async def refresh(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: ClockSource = Depends(get_clock),
    client: ClientContext = Depends(get_client_context),
):
    """
    Refresh JWT Token

    Issues a new access token for the company the refresh token is bound to.

    Raises:
        - 401 Unauthorized: INVALID_REFRESH_TOKEN, REVOKED_OR_EXPIRED_TOKEN
        - 429 Too Many Requests: RATE_LIMIT_EXCEEDED
    """
    use_case = RefreshTokenUseCase(uow, clock)
    result = await use_case.execute(request.refresh_token, client)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    response_model=LogoutResponse,
    dependencies=[Depends(RateLimit("logout", 10, 10, 60))],
)
async def logout(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: ClockSource = Depends(get_clock),
    client: ClientContext = Depends(get_client_context),
):
    """
    Logout

    Revokes the presented refresh token. Access tokens stay valid until
    they expire.
    """
    use_case = LogoutUseCase(uow, clock)
    result = await use_case.execute(request.refresh_token, client)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/whoami", status_code=status.HTTP_200_OK, response_model=WhoamiResponse)
async def whoami(
    claims: AccessTokenClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current user and company for the bearer token

    Raises:
        - 401 Unauthorized: missing, invalid or expired token
    """
    use_case = WhoamiUseCase(uow)
    result = await use_case.execute(claims)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., description="New password (min 8 chars)")


@router.post(
    "/change-password",
    status_code=status.HTTP_200_OK,
    response_model=ChangePasswordResponse,
    dependencies=[Depends(RateLimit("change-password", 5, 5, 60))],
)
async def change_password(
    request: ChangePasswordRequest,
    claims: AccessTokenClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
    verifier: ICredentialVerifier = Depends(get_credential_verifier),
    clock: ClockSource = Depends(get_clock),
    client: ClientContext = Depends(get_client_context),
):
    """
    Change Password

    Replaces the password of the bearer and revokes all their refresh tokens.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS (current password wrong)
        - 422 Unprocessable Entity: INVALID_PASSWORD
    """
    use_case = ChangePasswordUseCase(uow, verifier, clock)
    result = await use_case.execute(
        claims.user_id, request.current_password, request.new_password, client
    )

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class RequestPasswordResetRequest(BaseModel):
    """
    Request password reset HTTP request payload
    """

    email: EmailStr = Field(..., description="User email address")


@router.post(
    "/password-reset/request",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
    dependencies=[Depends(RateLimit("password-reset-request", 3, 3, 3600))],
)
async def request_password_reset(
    request: RequestPasswordResetRequest,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    notifier: IEmailNotifier = Depends(get_email_notifier),
    clock: ClockSource = Depends(get_clock),
    client: ClientContext = Depends(get_client_context),
):
    """
    Request Password Reset

    Always returns the same response so the endpoint cannot be used to
    discover registered emails. The email is sent after the response.
    """
    use_case = RequestPasswordResetUseCase(
        uow, notifier, clock, schedule=background_tasks.add_task
    )
    result = await use_case.execute(request.email, client)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class ConfirmPasswordResetRequest(BaseModel):
    """
    Confirm password reset HTTP request payload
    """

    token: str = Field(..., min_length=1, description="Password reset token from email")
    new_password: str = Field(..., description="New password (min 8 chars)")


@router.post(
    "/password-reset/confirm",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmPasswordResetResponse,
    dependencies=[Depends(RateLimit("password-reset-confirm", 5, 5, 60))],
)
async def confirm_password_reset(
    request: ConfirmPasswordResetRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    verifier: ICredentialVerifier = Depends(get_credential_verifier),
    clock: ClockSource = Depends(get_clock),
    client: ClientContext = Depends(get_client_context),
):
    """
    Confirm Password Reset

    Sets the new password and revokes every refresh token of the user.

    Raises:
        - 400 Bad Request: INVALID_RESET_TOKEN, TOKEN_ALREADY_USED
        - 410 Gone: TOKEN_EXPIRED
        - 422 Unprocessable Entity: INVALID_PASSWORD
    """
    use_case = ConfirmPasswordResetUseCase(uow, verifier, clock)
    result = await use_case.execute(request.token, request.new_password, client)

    if result.is_err():
        raise_for_error(result.error)

    return result.value
