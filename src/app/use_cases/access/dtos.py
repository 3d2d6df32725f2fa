"""
Gate Access Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the access domain.
Provides type safety and clear contracts between layers.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import AccessLogEntry, Invitation, InvitationStatus


class DenialReason(str, Enum):
    """Why a scan was refused; drives the guard-facing message"""

    invalid_credential = "INVALID_CREDENTIAL"
    not_found = "NOT_FOUND"
    invitation_not_active = "INVITATION_NOT_ACTIVE"
    invitation_not_yet_valid = "INVITATION_NOT_YET_VALID"
    already_exhausted = "ALREADY_EXHAUSTED"
    timeout = "TIMEOUT"


LOG_WRITE_FAILED = "LOG_WRITE_FAILED"


# ============================================================================
# Response DTOs
# ============================================================================


class InvitationSummary(BaseModel):
    """What the guard sees about the invitation behind a credential"""

    id: str
    visitor_name: str
    unit_id: str
    access_type: str
    current_uses: int
    max_uses: Optional[int]
    status: str

    @classmethod
    def from_entity(
        cls, invitation: Invitation, status: InvitationStatus
    ) -> "InvitationSummary":
        return cls(
            id=str(invitation.id),
            visitor_name=invitation.visitor_name,
            unit_id=str(invitation.unit_id),
            access_type=invitation.access_type.value,
            current_uses=invitation.current_uses,
            max_uses=invitation.max_uses,
            status=status.value,
        )


class AuthorizationResult(BaseModel):
    """
    Outcome of a gate scan.

    Denials are normal results, not errors. warning is set when access was
    granted but the access log entry could not be written.
    """

    granted: bool
    message: str
    reason: Optional[DenialReason] = None
    detail: Optional[str] = None
    log_id: Optional[str] = None
    warning: Optional[str] = None
    invitation: Optional[InvitationSummary] = None


class ManualEntryResponse(BaseModel):
    """Response for manual entry use case"""

    log_id: str
    unit_id: str
    accessed_at: str


class AccessLogResponse(BaseModel):
    """Single access log entry in response"""

    id: str
    unit_id: Optional[str]
    invitation_id: Optional[str]
    visitor_name: str
    visitor_phone: Optional[str]
    vehicle_plate: Optional[str]
    access_type: str
    method: str
    authorized_by: str
    notes: Optional[str]
    accessed_at: str

    @classmethod
    def from_entity(cls, entry: AccessLogEntry) -> "AccessLogResponse":
        return cls(
            id=str(entry.id),
            unit_id=str(entry.unit_id) if entry.unit_id else None,
            invitation_id=str(entry.invitation_id) if entry.invitation_id else None,
            visitor_name=entry.visitor_name,
            visitor_phone=entry.visitor_phone,
            vehicle_plate=entry.vehicle_plate,
            access_type=entry.access_type.value,
            method=entry.method.value,
            authorized_by=str(entry.authorized_by),
            notes=entry.notes,
            accessed_at=entry.accessed_at.isoformat() + "Z",
        )


class AccessLogPageResponse(BaseModel):
    """Response for list access logs use case"""

    entries: List[AccessLogResponse]
    next_cursor: Optional[str]
