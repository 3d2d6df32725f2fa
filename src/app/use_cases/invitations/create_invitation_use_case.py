"""
Create Invitation Use Case

Handles a resident (or admin) inviting a visitor to the community.
"""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from libs.result import Error, Result, Return
from src.app.services.invitation_codec import InvitationCodec
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import get_active_membership
from src.domain.base import to_naive_utc, utc_now
from src.domain.entities import (
    AccessType,
    AuditEvent,
    Invitation,
    InvitationStatus,
    MembershipRole,
)
from src.domain.permissions import Permission, has_permission

from .dtos import CreateInvitationCommand, InvitationResponse

logger = logging.getLogger(__name__)


def _validation_error(field: str, message: str) -> Result:
    return Return.err(Error("VALIDATION_ERROR", message, field=field))


class CreateInvitationUseCase:
    """
    Use case for creating visitor invitations.

    Business Rules:
    - Caller needs invitations.create; residents may only invite to their own unit
    - visitor_name is required
    - single: max_uses absent or 1, stored as 1
    - multiple: max_uses required and >= 1
    - permanent: no valid_until, no max_uses
    - temporary/single/multiple: valid_until required
    - valid_from defaults to now and must not be after valid_until
    - Short code is regenerated on collision, up to SHORT_CODE_MAX_ATTEMPTS
    - Creates audit event invitation_created
    """

    def __init__(
        self,
        uow: UnitOfWork,
        codec: Optional[InvitationCodec] = None,
        max_code_attempts: Optional[int] = None,
    ):
        self.uow = uow
        self.codec = codec or InvitationCodec.from_config()
        if max_code_attempts is None:
            from config import ApplicationConfig

            max_code_attempts = ApplicationConfig.SHORT_CODE_MAX_ATTEMPTS
        self.max_code_attempts = max_code_attempts

    async def execute(
        self,
        user_id: UUID,
        organization_id: UUID,
        command: CreateInvitationCommand,
        now: Optional[datetime] = None,
    ) -> Result[InvitationResponse]:
        """
        Execute create invitation use case.

        Args:
            user_id: User ID of the inviting member
            organization_id: Organization the invitation belongs to
            command: Invitation form data
            now: Creation time (defaults to current UTC time)

        Returns:
            Result with InvitationResponse DTO, or Error
        """
        now = to_naive_utc(now) if now is not None else utc_now()

        async with self.uow:
            membership_result = await get_active_membership(
                self.uow, user_id, organization_id
            )
            if membership_result.is_err():
                return membership_result
            membership = membership_result.value

            if not has_permission(membership.role, Permission.invitations_create):
                return Return.err(
                    Error(
                        "INSUFFICIENT_ROLE",
                        "You do not have permission to create invitations",
                    )
                )

            # Form validation
            visitor_name = (command.visitor_name or "").strip()
            if not visitor_name:
                return _validation_error("visitor_name", "Visitor name is required")

            try:
                access_type = AccessType(command.access_type)
            except ValueError:
                return _validation_error(
                    "access_type",
                    f"Invalid access type: {command.access_type}. "
                    "Must be one of: single, multiple, permanent, temporary",
                )

            valid_from = to_naive_utc(command.valid_from) or now
            valid_until = to_naive_utc(command.valid_until)
            max_uses = command.max_uses

            if access_type == AccessType.permanent:
                if valid_until is not None:
                    return _validation_error(
                        "valid_until", "Permanent invitations cannot have an end date"
                    )
            elif valid_until is None:
                return _validation_error(
                    "valid_until",
                    f"An end date is required for {access_type.value} invitations",
                )

            if access_type == AccessType.single:
                if max_uses not in (None, 1):
                    return _validation_error(
                        "max_uses", "Single-use invitations allow exactly one use"
                    )
                max_uses = 1
            elif access_type == AccessType.multiple:
                if max_uses is None or max_uses < 1:
                    return _validation_error(
                        "max_uses",
                        "Multiple-use invitations need max_uses of at least 1",
                    )
            elif max_uses is not None:
                return _validation_error(
                    "max_uses",
                    f"{access_type.value.capitalize()} invitations have no use limit",
                )

            if valid_until is not None and valid_from > valid_until:
                return _validation_error(
                    "valid_until", "End date must be after the start date"
                )

            # Resolve target unit
            if command.unit_id is not None:
                try:
                    unit_id = UUID(command.unit_id)
                except ValueError:
                    return _validation_error("unit_id", "Invalid unit ID format")
            else:
                unit_id = membership.unit_id

            if unit_id is None:
                return _validation_error("unit_id", "A unit is required")

            if (
                membership.role == MembershipRole.resident
                and unit_id != membership.unit_id
            ):
                return Return.err(
                    Error(
                        "INSUFFICIENT_ROLE",
                        "Residents can only invite visitors to their own unit",
                    )
                )

            unit = await self.uow.units.get_by_id(unit_id)
            if unit is None or unit.organization_id != organization_id:
                return Return.err(Error("UNIT_NOT_FOUND", "Unit not found"))

            # Reserve a short code unique within the organization
            short_code = None
            for _ in range(self.max_code_attempts):
                candidate = self.codec.new_short_code()
                if not await self.uow.invitations.short_code_exists(
                    organization_id, candidate
                ):
                    short_code = candidate
                    break

            if short_code is None:
                logger.error(
                    "Short code generation exhausted after %d attempts (organization=%s)",
                    self.max_code_attempts,
                    organization_id,
                )
                return Return.err(
                    Error(
                        "CODE_GENERATION_EXHAUSTED",
                        "Could not generate a unique access code, please try again",
                    )
                )

            invitation_id = uuid4()
            credentials = self.codec.encode(invitation_id, short_code)

            invitation = Invitation(
                id=invitation_id,
                organization_id=organization_id,
                unit_id=unit_id,
                created_by=user_id,
                visitor_name=visitor_name,
                visitor_phone=command.visitor_phone or None,
                visitor_email=command.visitor_email or None,
                vehicle_plate=command.vehicle_plate or None,
                notes=command.notes or None,
                access_type=access_type,
                max_uses=max_uses,
                current_uses=0,
                valid_from=valid_from,
                valid_until=valid_until,
                short_code=credentials.short_code,
                qr_code=credentials.qr_payload,
                status=InvitationStatus.active,
                created_at=now,
                updated_at=now,
            )

            await self.uow.invitations.create(invitation)

            audit = AuditEvent(
                organization_id=organization_id,
                user_id=user_id,
                action="invitation_created",
                event_metadata={
                    "invitation_id": str(invitation.id),
                    "unit_id": str(unit_id),
                    "short_code": invitation.short_code,
                    "access_type": access_type.value,
                },
            )
            await self.uow.audit_events.create(audit)

            await self.uow.commit()

            logger.info(
                "Invitation %s created for %s (code=%s, type=%s)",
                invitation.id,
                visitor_name,
                invitation.short_code,
                access_type.value,
            )

            return Return.ok(
                InvitationResponse.from_entity(invitation, InvitationStatus.active)
            )
