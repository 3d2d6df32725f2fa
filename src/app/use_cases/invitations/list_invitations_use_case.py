"""
List Invitations Use Case

Lists invitations of a unit or a whole organization, filtered by derived status.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import get_active_membership
from src.domain.entities import InvitationStatus
from src.domain.permissions import Permission, has_permission
from src.domain.visibility import derive_status

from .dtos import InvitationListResponse, InvitationResponse


class ListInvitationsUseCase:
    """
    Use case for listing invitations.

    Business Rules:
    - invitations.view.all may list the organization or any unit
    - invitations.view.unit is pinned to the member's own unit
    - The status filter applies to the derived status, so a stored-active
      invitation past valid_until is listed as expired
    - Results ordered by newest first
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        organization_id: UUID,
        unit_id: Optional[UUID] = None,
        statuses: Optional[List[str]] = None,
        now: Optional[datetime] = None,
    ) -> Result[InvitationListResponse]:
        wanted = None
        if statuses:
            try:
                wanted = {InvitationStatus(s) for s in statuses}
            except ValueError:
                return Return.err(
                    Error(
                        "VALIDATION_ERROR",
                        "Invalid status filter. Must be any of: active, used, expired, cancelled",
                        field="status",
                    )
                )

        async with self.uow:
            membership_result = await get_active_membership(
                self.uow, user_id, organization_id
            )
            if membership_result.is_err():
                return membership_result
            membership = membership_result.value

            if not has_permission(membership.role, Permission.invitations_view_all):
                if not has_permission(
                    membership.role, Permission.invitations_view_unit
                ) or membership.unit_id is None:
                    return Return.err(
                        Error(
                            "INSUFFICIENT_ROLE",
                            "You do not have permission to view invitations",
                        )
                    )
                if unit_id is not None and unit_id != membership.unit_id:
                    return Return.err(
                        Error(
                            "INSUFFICIENT_ROLE",
                            "You can only view invitations of your own unit",
                        )
                    )
                unit_id = membership.unit_id

            invitations = await self.uow.invitations.list_by_organization(
                organization_id, unit_id=unit_id
            )

            items = []
            for invitation in invitations:
                status = derive_status(invitation, now)
                if wanted is not None and status not in wanted:
                    continue
                items.append(InvitationResponse.from_entity(invitation, status))

            return Return.ok(InvitationListResponse(invitations=items))
