"""
Admin API Routes - Maintenance Endpoints

Authentication is via Admin API Key, not user JWTs.
"""

from fastapi import APIRouter, Depends, status

from iam_core.api.error import raise_for_error
from iam_core.api.utils.admin_auth import verify_admin_api_key
from iam_core.app.services.clock import ClockSource
from iam_core.app.services.unit_of_work import UnitOfWork
from iam_core.app.use_cases.maintenance import PurgeExpiredResponse, PurgeExpiredUseCase
from iam_core.depends import get_clock, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/maintenance/purge-expired",
    status_code=status.HTTP_200_OK,
    response_model=PurgeExpiredResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def purge_expired(
    uow: UnitOfWork = Depends(get_unit_of_work),
    clock: ClockSource = Depends(get_clock),
):
    """
    Purge Expired Records

    Deletes expired login tickets and expires stale password reset requests.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
    """
    use_case = PurgeExpiredUseCase(uow, clock)
    result = await use_case.execute()

    if result.is_err():
        raise_for_error(result.error)

    return result.value
