"""
Invitation Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the invitation domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import Invitation, InvitationStatus


# ============================================================================
# Command DTOs
# ============================================================================


class CreateInvitationCommand(BaseModel):
    """
    Create invitation command - the resident's form after HTTP validation.

    unit_id may be omitted by residents; their own unit is used.
    """

    visitor_name: str
    access_type: str
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    max_uses: Optional[int] = None
    unit_id: Optional[str] = None
    visitor_phone: Optional[str] = None
    visitor_email: Optional[str] = None
    vehicle_plate: Optional[str] = None
    notes: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class InvitationResponse(BaseModel):
    """Invitation with its derived status and both credentials"""

    id: str
    organization_id: str
    unit_id: str
    created_by: str
    visitor_name: str
    visitor_phone: Optional[str]
    visitor_email: Optional[str]
    vehicle_plate: Optional[str]
    notes: Optional[str]
    access_type: str
    max_uses: Optional[int]
    current_uses: int
    valid_from: str
    valid_until: Optional[str]
    short_code: str
    qr_code: str
    status: str
    created_at: str

    @classmethod
    def from_entity(
        cls, invitation: Invitation, status: InvitationStatus
    ) -> "InvitationResponse":
        return cls(
            id=str(invitation.id),
            organization_id=str(invitation.organization_id),
            unit_id=str(invitation.unit_id),
            created_by=str(invitation.created_by),
            visitor_name=invitation.visitor_name,
            visitor_phone=invitation.visitor_phone,
            visitor_email=invitation.visitor_email,
            vehicle_plate=invitation.vehicle_plate,
            notes=invitation.notes,
            access_type=invitation.access_type.value,
            max_uses=invitation.max_uses,
            current_uses=invitation.current_uses,
            valid_from=invitation.valid_from.isoformat(),
            valid_until=(
                invitation.valid_until.isoformat() if invitation.valid_until else None
            ),
            short_code=invitation.short_code,
            qr_code=invitation.qr_code,
            status=status.value,
            created_at=invitation.created_at.isoformat(),
        )


class InvitationListResponse(BaseModel):
    """Response for list invitations use case"""

    invitations: List[InvitationResponse]


class CancelInvitationResponse(BaseModel):
    """Response for cancel invitation use case"""

    invitation_id: str
    status: str
