"""
Authorize Access Use Case

Decides whether a presented credential lets a visitor through the gate,
consumes one use on success and writes the access log entry.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.access_log_recorder import AccessLogRecorder
from src.app.services.invitation_codec import Credential, CredentialKind, InvitationCodec
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import get_active_membership
from src.domain.entities import AccessDirection, AccessMethod, Invitation, InvitationStatus
from src.domain.permissions import Permission, has_permission
from src.domain.visibility import derive_status, is_not_yet_valid

from .credential_resolver import find_by_credential
from .dtos import LOG_WRITE_FAILED, AuthorizationResult, DenialReason, InvitationSummary

logger = logging.getLogger(__name__)

NOT_ACTIVE_MESSAGES = {
    InvitationStatus.used: "This invitation has already been used",
    InvitationStatus.expired: "This invitation has expired",
    InvitationStatus.cancelled: "This invitation has been cancelled",
}


@dataclass
class _Admission:
    """A consumed but not yet committed use"""

    invitation: Invitation
    presented: Credential
    new_uses: int


def _denied(
    reason: DenialReason,
    message: str,
    detail: Optional[str] = None,
    invitation: Optional[InvitationSummary] = None,
) -> Result[AuthorizationResult]:
    logger.warning("Access denied: %s (%s)", reason.value, detail or message)
    return Return.ok(
        AuthorizationResult(
            granted=False,
            reason=reason,
            detail=detail,
            message=message,
            invitation=invitation,
        )
    )


class AuthorizeAccessUseCase:
    """
    Use case for authorizing a gate scan.

    Business Rules:
    - Caller needs access.scan
    - QR payloads are decoded and signature-checked; anything else is a short code
    - Credentials resolve only within the caller's organization
    - Derived status must be active, and valid_from must have passed; a used
      invitation is reported as ALREADY_EXHAUSTED
    - One use is consumed with an atomic conditional update; losing a race
      is ALREADY_EXHAUSTED
    - Entry and exit both consume a use
    - The timeout bounds everything up to the consume; once the use is
      committed the access log is always written (or flagged)
    - A failed log write still grants access and is reported as a warning
    """

    def __init__(
        self,
        uow: UnitOfWork,
        codec: Optional[InvitationCodec] = None,
        timeout: Optional[float] = None,
    ):
        self.uow = uow
        self.codec = codec or InvitationCodec.from_config()
        self.timeout = timeout

    async def execute(
        self,
        user_id: UUID,
        organization_id: UUID,
        credential: str,
        direction: str,
        now: Optional[datetime] = None,
    ) -> Result[AuthorizationResult]:
        """
        Execute authorize access use case.

        Args:
            user_id: Guard (or admin) presenting the credential
            organization_id: Organization whose gate is being used
            credential: Raw scanned QR payload or typed short code
            direction: entry or exit
            now: Evaluation time (defaults to current UTC time)

        Returns:
            Result with AuthorizationResult (granted or denied with reason),
            or Error for caller problems (NOT_A_MEMBER, INSUFFICIENT_ROLE,
            INVALID_DIRECTION)
        """
        try:
            access_direction = AccessDirection(direction)
        except ValueError:
            return Return.err(
                Error(
                    "INVALID_DIRECTION",
                    f"Invalid direction: {direction}. Must be one of: entry, exit",
                    field="direction",
                )
            )

        async with self.uow:
            try:
                admitted = await asyncio.wait_for(
                    self._admit(user_id, organization_id, credential, now),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                # Nothing committed yet: the exit of the unit of work rolls back
                logger.error(
                    "Authorization timed out after %ss (organization=%s)",
                    self.timeout,
                    organization_id,
                )
                return _denied(
                    DenialReason.timeout, "Validation timed out, please try again"
                )

            if admitted.is_err() or not isinstance(admitted.value, _Admission):
                return admitted
            admission = admitted.value
            invitation = admission.invitation

            await self.uow.commit()

            exhausted = (
                invitation.max_uses is not None
                and admission.new_uses >= invitation.max_uses
            )
            summary = InvitationSummary.from_entity(
                invitation,
                InvitationStatus.used if exhausted else InvitationStatus.active,
            ).model_copy(update={"current_uses": admission.new_uses})

            logger.info(
                "Access granted: invitation %s (%s) %s, use %d/%s",
                invitation.id,
                invitation.short_code,
                access_direction.value,
                admission.new_uses,
                invitation.max_uses if invitation.max_uses is not None else "unlimited",
            )

            # Step 5: ledger append; never revokes the grant
            method = (
                AccessMethod.qr_scan
                if admission.presented.kind == CredentialKind.qr
                else AccessMethod.manual_code
            )
            log_result = await AccessLogRecorder(self.uow).append(
                organization_id=organization_id,
                direction=access_direction.value,
                method=method.value,
                visitor_name=invitation.visitor_name,
                authorized_by=user_id,
                unit_id=invitation.unit_id,
                invitation_id=invitation.id,
                visitor_phone=invitation.visitor_phone,
                vehicle_plate=invitation.vehicle_plate,
            )

            if log_result.is_err():
                logger.warning(
                    "Access granted for invitation %s but not logged: %s",
                    summary.id,
                    log_result.error.code,
                )
                return Return.ok(
                    AuthorizationResult(
                        granted=True,
                        message="Access granted (access log needs reconciliation)",
                        warning=LOG_WRITE_FAILED,
                        invitation=summary,
                    )
                )

            return Return.ok(
                AuthorizationResult(
                    granted=True,
                    message="Access granted",
                    log_id=str(log_result.value.id),
                    invitation=summary,
                )
            )

    async def _admit(
        self,
        user_id: UUID,
        organization_id: UUID,
        credential: str,
        now: Optional[datetime],
    ) -> Result[Union[AuthorizationResult, _Admission]]:
        """Checks the caller and the credential, then consumes one use (uncommitted)."""
        membership_result = await get_active_membership(
            self.uow, user_id, organization_id
        )
        if membership_result.is_err():
            return membership_result

        if not has_permission(membership_result.value.role, Permission.access_scan):
            return Return.err(
                Error(
                    "INSUFFICIENT_ROLE",
                    "You do not have permission to authorize access",
                )
            )

        # Step 1-2: decode and resolve
        presented = self.codec.parse(credential)
        resolved = await find_by_credential(
            self.uow, self.codec, organization_id, presented
        )
        if resolved.is_err():
            error = resolved.error
            if error.code == "CREDENTIAL_MALFORMED":
                return _denied(
                    DenialReason.invalid_credential, error.message, "malformed"
                )
            if error.code == "CREDENTIAL_TAMPERED":
                return _denied(
                    DenialReason.invalid_credential, error.message, "tampered"
                )
            return _denied(DenialReason.not_found, "Invitation not found")
        invitation = resolved.value

        # Step 3: derived status
        status = derive_status(invitation, now)
        if status == InvitationStatus.used:
            # Budget already spent: same outcome as losing the consume race
            return _denied(
                DenialReason.already_exhausted,
                NOT_ACTIVE_MESSAGES[status],
                status.value,
                InvitationSummary.from_entity(invitation, status),
            )
        if status != InvitationStatus.active:
            return _denied(
                DenialReason.invitation_not_active,
                NOT_ACTIVE_MESSAGES[status],
                status.value,
                InvitationSummary.from_entity(invitation, status),
            )

        if is_not_yet_valid(invitation, now):
            return _denied(
                DenialReason.invitation_not_yet_valid,
                f"This invitation is valid from {invitation.valid_from:%Y-%m-%d %H:%M} UTC",
                invitation=InvitationSummary.from_entity(invitation, status),
            )

        # Step 4: atomic consume
        new_uses = await self.uow.invitations.consume(invitation.id)
        if new_uses is None:
            return _denied(
                DenialReason.already_exhausted,
                "This invitation has reached its use limit",
                invitation=InvitationSummary.from_entity(invitation, status),
            )

        return Return.ok(_Admission(invitation, presented, new_uses))
