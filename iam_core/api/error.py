from typing import Optional

from fastapi import status

from iam_core.app.errors import AuthErrorCode
from iam_core.libs.result import Error


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: Optional[dict] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.headers = headers
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


ERROR_STATUS_CODES = {
    AuthErrorCode.INVALID_CREDENTIALS.value: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.INVALID_TICKET.value: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.INVALID_REFRESH_TOKEN.value: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.REVOKED_OR_EXPIRED_TOKEN.value: status.HTTP_401_UNAUTHORIZED,
    AuthErrorCode.INVALID_RESET_TOKEN.value: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.TOKEN_ALREADY_USED.value: status.HTTP_400_BAD_REQUEST,
    AuthErrorCode.TOKEN_EXPIRED.value: status.HTTP_410_GONE,
    AuthErrorCode.INVALID_PASSWORD.value: status.HTTP_422_UNPROCESSABLE_ENTITY,
    AuthErrorCode.RATE_LIMIT_EXCEEDED.value: status.HTTP_429_TOO_MANY_REQUESTS,
    AuthErrorCode.SERVICE_UNAVAILABLE.value: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def raise_for_error(error: Error):
    """Map a use case error to its HTTP error; unknown codes are server errors"""
    status_code = ERROR_STATUS_CODES.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)
