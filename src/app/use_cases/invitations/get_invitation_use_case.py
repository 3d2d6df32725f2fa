"""
Get Invitation Use Case

Loads one invitation with its derived status.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import get_active_membership
from src.domain.permissions import Permission, has_permission
from src.domain.visibility import derive_status

from .dtos import InvitationResponse


class GetInvitationUseCase:
    """
    Use case for reading a single invitation.

    Business Rules:
    - invitations.view.all sees every invitation of the organization
    - invitations.view.unit sees only invitations of the member's unit
    - Anything else, including other organizations, is INVITATION_NOT_FOUND
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        organization_id: UUID,
        invitation_id: UUID,
        now: Optional[datetime] = None,
    ) -> Result[InvitationResponse]:
        async with self.uow:
            membership_result = await get_active_membership(
                self.uow, user_id, organization_id
            )
            if membership_result.is_err():
                return membership_result
            membership = membership_result.value

            invitation = await self.uow.invitations.get_by_id(invitation_id)
            if invitation is None or invitation.organization_id != organization_id:
                return Return.err(
                    Error("INVITATION_NOT_FOUND", "Invitation not found")
                )

            visible = has_permission(
                membership.role, Permission.invitations_view_all
            ) or (
                has_permission(membership.role, Permission.invitations_view_unit)
                and invitation.unit_id == membership.unit_id
            )
            if not visible:
                return Return.err(
                    Error("INVITATION_NOT_FOUND", "Invitation not found")
                )

            return Return.ok(
                InvitationResponse.from_entity(invitation, derive_status(invitation, now))
            )
