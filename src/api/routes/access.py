from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from config import ApplicationConfig
from libs.result import Error
from src.api.error import ClientError, ServerError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.access import (
    AuthorizationResult,
    AuthorizeAccessUseCase,
    ManualEntryResponse,
    RecordManualEntryUseCase,
)
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/access", tags=["Access"])


class AuthorizeAccessRequest(BaseModel):
    credential: str = Field(..., description="Scanned QR payload or typed short code")
    direction: str = Field(..., description="entry or exit")


class ManualEntryRequest(BaseModel):
    visitor_name: str = Field(..., max_length=255)
    unit_reference: str = Field(
        ..., description="Unit number, or building-unit_number"
    )
    direction: str = Field(..., description="entry or exit")
    notes: Optional[str] = None
    visitor_phone: Optional[str] = Field(None, max_length=50)
    vehicle_plate: Optional[str] = Field(None, max_length=20)


def _raise_for_error(error: Error):
    if error.code in ("NOT_A_MEMBER", "INSUFFICIENT_ROLE"):
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    elif error.code == "UNIT_NOT_FOUND":
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    elif error.code in ("INVALID_DIRECTION", "INVALID_METHOD", "VISITOR_NAME_REQUIRED"):
        raise ClientError(error, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
    elif error.code == "LOG_WRITE_FAILED":
        raise ServerError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    raise ServerError(error)


@router.post(
    "/authorize",
    status_code=status.HTTP_200_OK,
    response_model=AuthorizationResult,
    response_model_exclude_none=True,
)
async def authorize_access(
    request: AuthorizeAccessRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Authorize Access

    Validates a presented credential at the gate and consumes one use.
    A denial is a normal 200 response with granted=false and a reason.

    Raises:
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
        - 422 Unprocessable Entity: INVALID_DIRECTION
    """
    user_id = UUID(current_user["user_id"])
    organization_id = UUID(current_user["organization_id"])

    use_case = AuthorizeAccessUseCase(
        uow, timeout=ApplicationConfig.AUTHORIZE_TIMEOUT_SECONDS
    )
    result = await use_case.execute(
        user_id, organization_id, request.credential, request.direction
    )

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.post(
    "/manual-entry",
    status_code=status.HTTP_201_CREATED,
    response_model=ManualEntryResponse,
)
async def record_manual_entry(
    request: ManualEntryRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Record Manual Entry

    Logs a visitor let through by the guard without a credential.

    Raises:
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
        - 404 Not Found: UNIT_NOT_FOUND
        - 422 Unprocessable Entity: VISITOR_NAME_REQUIRED, INVALID_DIRECTION
        - 503 Service Unavailable: LOG_WRITE_FAILED
    """
    user_id = UUID(current_user["user_id"])
    organization_id = UUID(current_user["organization_id"])

    use_case = RecordManualEntryUseCase(uow)
    result = await use_case.execute(
        user_id,
        organization_id,
        visitor_name=request.visitor_name,
        unit_reference=request.unit_reference,
        direction=request.direction,
        notes=request.notes,
        visitor_phone=request.visitor_phone,
        vehicle_plate=request.vehicle_plate,
    )

    if result.is_err():
        _raise_for_error(result.error)

    return result.value
