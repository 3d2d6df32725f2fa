from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from pydantic import BaseModel, Field

from libs.result import Error
from src.api.error import ClientError, ServerError
from src.api.utils.qr import render_qr_png
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.invitations import (
    CancelInvitationResponse,
    CancelInvitationUseCase,
    CreateInvitationCommand,
    CreateInvitationUseCase,
    GetInvitationUseCase,
    InvitationListResponse,
    InvitationResponse,
    ListInvitationsUseCase,
)
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(prefix="/invitations", tags=["Invitations"])


class CreateInvitationRequest(BaseModel):
    """
    Create invitation HTTP request payload

    Validates incoming request shape; business rules live in the use case.
    """

    visitor_name: str = Field(..., max_length=255, description="Visitor full name")
    access_type: str = Field(
        ..., description="single, multiple, permanent or temporary"
    )
    valid_from: Optional[datetime] = Field(
        None, description="Start of validity (defaults to now)"
    )
    valid_until: Optional[datetime] = Field(
        None, description="End of validity (forbidden for permanent)"
    )
    max_uses: Optional[int] = Field(None, description="Use budget for multiple")
    unit_id: Optional[str] = Field(
        None, description="Target unit (defaults to the resident's unit)"
    )
    visitor_phone: Optional[str] = Field(None, max_length=50)
    visitor_email: Optional[str] = Field(None, max_length=255)
    vehicle_plate: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None


def _parse_uuid(value: str, code: str, label: str) -> UUID:
    try:
        return UUID(value)
    except ValueError:
        raise ClientError(
            Error(code, f"Invalid {label} format"),
            status_code=status.HTTP_400_BAD_REQUEST,
        )


def _raise_for_error(error: Error):
    if error.code in ("NOT_A_MEMBER", "INSUFFICIENT_ROLE"):
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    elif error.code in ("INVITATION_NOT_FOUND", "UNIT_NOT_FOUND"):
        raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
    elif error.code == "VALIDATION_ERROR":
        raise ClientError(error, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)
    elif error.code == "ALREADY_TERMINAL":
        raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
    elif error.code == "CODE_GENERATION_EXHAUSTED":
        raise ServerError(error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    raise ServerError(error)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=InvitationResponse,
)
async def create_invitation(
    request: CreateInvitationRequest,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Create Invitation

    Creates a visitor invitation with its QR payload and short code.

    Raises:
        - 401 Unauthorized: Invalid or expired JWT
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
        - 404 Not Found: UNIT_NOT_FOUND
        - 422 Unprocessable Entity: VALIDATION_ERROR (with field)
        - 503 Service Unavailable: CODE_GENERATION_EXHAUSTED
    """
    user_id = UUID(current_user["user_id"])
    organization_id = UUID(current_user["organization_id"])

    command = CreateInvitationCommand(**request.model_dump())

    use_case = CreateInvitationUseCase(uow)
    result = await use_case.execute(user_id, organization_id, command)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.get(
    "",
    status_code=status.HTTP_200_OK,
    response_model=InvitationListResponse,
)
async def list_invitations(
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    unit_id: Optional[str] = Query(None, description="Restrict to one unit"),
    status_filter: Optional[List[str]] = Query(
        None, alias="status", description="Derived statuses to include"
    ),
):
    """
    List Invitations

    Returns invitations newest first with their derived status.
    Residents only see their own unit.
    """
    user_id = UUID(current_user["user_id"])
    organization_id = UUID(current_user["organization_id"])

    unit_uuid = _parse_uuid(unit_id, "INVALID_UNIT_ID", "unit ID") if unit_id else None

    use_case = ListInvitationsUseCase(uow)
    result = await use_case.execute(
        user_id, organization_id, unit_id=unit_uuid, statuses=status_filter
    )

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.get(
    "/{invitation_id}",
    status_code=status.HTTP_200_OK,
    response_model=InvitationResponse,
)
async def get_invitation(
    invitation_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Invitation

    Raises:
        - 400 Bad Request: Invalid invitation_id format
        - 403 Forbidden: NOT_A_MEMBER
        - 404 Not Found: INVITATION_NOT_FOUND
    """
    user_id = UUID(current_user["user_id"])
    organization_id = UUID(current_user["organization_id"])
    invitation_uuid = _parse_uuid(invitation_id, "INVALID_INVITATION_ID", "invitation ID")

    use_case = GetInvitationUseCase(uow)
    result = await use_case.execute(user_id, organization_id, invitation_uuid)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value


@router.get("/{invitation_id}/qr", status_code=status.HTTP_200_OK)
async def get_invitation_qr(
    invitation_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Get Invitation QR Image

    Returns the QR payload rendered as a PNG for sharing with the visitor.
    """
    user_id = UUID(current_user["user_id"])
    organization_id = UUID(current_user["organization_id"])
    invitation_uuid = _parse_uuid(invitation_id, "INVALID_INVITATION_ID", "invitation ID")

    use_case = GetInvitationUseCase(uow)
    result = await use_case.execute(user_id, organization_id, invitation_uuid)

    if result.is_err():
        _raise_for_error(result.error)

    # PIL encoding is CPU-bound
    png = await run_in_threadpool(render_qr_png, result.value.qr_code)
    return Response(content=png, media_type="image/png")


@router.post(
    "/{invitation_id}/cancel",
    status_code=status.HTTP_200_OK,
    response_model=CancelInvitationResponse,
)
async def cancel_invitation(
    invitation_id: str,
    current_user: dict = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Cancel Invitation

    Cancels an active invitation. Cancellation is terminal.

    Raises:
        - 400 Bad Request: Invalid invitation_id format
        - 403 Forbidden: NOT_A_MEMBER, INSUFFICIENT_ROLE
        - 404 Not Found: INVITATION_NOT_FOUND
        - 409 Conflict: ALREADY_TERMINAL
    """
    user_id = UUID(current_user["user_id"])
    organization_id = UUID(current_user["organization_id"])
    invitation_uuid = _parse_uuid(invitation_id, "INVALID_INVITATION_ID", "invitation ID")

    use_case = CancelInvitationUseCase(uow)
    result = await use_case.execute(user_id, organization_id, invitation_uuid)

    if result.is_err():
        _raise_for_error(result.error)

    return result.value
