from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import AccessLogPageResponse, ListAccessLogsUseCase
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(tags=["Access Logs"])


def _parse_optional_uuid(value: Optional[str], code: str) -> Optional[UUID]:
    if value is None:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise ClientError(
            Error(code, f"Invalid {code.lower().replace('_', ' ')}"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )


@router.get(
    "/access-logs",
    status_code=status.HTTP_200_OK,
    response_model=AccessLogPageResponse,
)
async def list_access_logs(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    limit: int = Query(
        ApplicationConfig.ACCESS_LOG_PAGE_SIZE,
        ge=1,
        le=100,
        description="Number of entries per page",
    ),
    cursor: Optional[str] = Query(None, description="Pagination cursor"),
    unit_id: Optional[str] = Query(None, description="Filter by unit"),
    invitation_id: Optional[str] = Query(None, description="Filter by invitation"),
):
    """
    List Access Logs

    Returns gate events, newest first, with cursor pagination.

    Raises:
        - 400 Bad Request: INVALID_CURSOR, INVALID_UNIT_ID, INVALID_INVITATION_ID
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
    """
    user_id = UUID(current_user["user_id"])
    organization_id = UUID(current_user["organization_id"])

    use_case = ListAccessLogsUseCase(uow)
    result = await use_case.execute(
        user_id,
        organization_id,
        limit=limit,
        cursor=cursor,
        unit_id=_parse_optional_uuid(unit_id, "INVALID_UNIT_ID"),
        invitation_id=_parse_optional_uuid(invitation_id, "INVALID_INVITATION_ID"),
    )

    if result.is_err():
        error = result.error
        if error.code in ("NOT_A_MEMBER", "INSUFFICIENT_ROLE"):
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        if error.code == "INVALID_CURSOR":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        raise ServerError(error)

    return result.value
