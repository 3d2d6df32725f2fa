"""
Cancel Invitation Use Case

Handles withdrawing an invitation before it is used up or expires.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import get_active_membership
from src.domain.base import utc_now
from src.domain.entities import AuditEvent, InvitationStatus
from src.domain.permissions import Permission, has_permission
from src.domain.visibility import derive_status

from .dtos import CancelInvitationResponse

logger = logging.getLogger(__name__)


class CancelInvitationUseCase:
    """
    Use case for cancelling invitations.

    Business Rules:
    - Creator with invitations.cancel, or anyone with invitations.cancel.all
    - Only an invitation whose derived status is active can be cancelled
    - Cancelled is persisted and terminal
    - Creates audit event invitation_cancelled
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        organization_id: UUID,
        invitation_id: UUID,
        now: Optional[datetime] = None,
    ) -> Result[CancelInvitationResponse]:
        """
        Execute cancel invitation use case.

        Args:
            user_id: User ID of the person cancelling
            organization_id: Current organization ID
            invitation_id: ID of the invitation to cancel
            now: Evaluation time for expiry (defaults to current UTC time)

        Returns:
            Result with CancelInvitationResponse DTO, or Error
        """
        async with self.uow:
            membership_result = await get_active_membership(
                self.uow, user_id, organization_id
            )
            if membership_result.is_err():
                return membership_result
            membership = membership_result.value

            invitation = await self.uow.invitations.get_by_id(invitation_id)

            # Invitations of other organizations are invisible
            if invitation is None or invitation.organization_id != organization_id:
                return Return.err(
                    Error("INVITATION_NOT_FOUND", "Invitation not found")
                )

            can_cancel = has_permission(
                membership.role, Permission.invitations_cancel_all
            ) or (
                has_permission(membership.role, Permission.invitations_cancel)
                and invitation.created_by == user_id
            )
            if not can_cancel:
                return Return.err(
                    Error(
                        "INSUFFICIENT_ROLE",
                        "You can only cancel invitations you created",
                    )
                )

            now = now or utc_now()
            status = derive_status(invitation, now)
            if status != InvitationStatus.active:
                return Return.err(
                    Error(
                        "ALREADY_TERMINAL",
                        f"Invitation is already {status.value}",
                    )
                )

            if not await self.uow.invitations.cancel(invitation.id, now):
                # A scan used it up after the read; the row was reloaded
                status = derive_status(invitation, now)
                logger.info(
                    "Invitation %s became %s before it could be cancelled",
                    invitation.id,
                    status.value,
                )
                return Return.err(
                    Error(
                        "ALREADY_TERMINAL",
                        f"Invitation is already {status.value}",
                    )
                )

            audit = AuditEvent(
                organization_id=organization_id,
                user_id=user_id,
                action="invitation_cancelled",
                event_metadata={
                    "invitation_id": str(invitation.id),
                    "short_code": invitation.short_code,
                    "current_uses": invitation.current_uses,
                },
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            logger.info("Invitation %s cancelled by %s", invitation.id, user_id)

            return Return.ok(
                CancelInvitationResponse(
                    invitation_id=str(invitation.id),
                    status=InvitationStatus.cancelled.value,
                )
            )
