"""
Invitation Entity

Visitor access authorization with a validity window and a usage budget.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now

from .enums import AccessType, InvitationStatus


class Invitation(SQLModel, table=True):
    """
    Invitation entity - a visitor's credential to pass the gate.

    Business Rules:
    - Created by a resident (own unit) or an admin/owner (any unit)
    - max_uses is 1 for single, N for multiple, NULL for permanent/temporary
    - current_uses only grows, and only through the atomic consume update
    - status stores terminal flags (used, cancelled); expiry is derived from
      valid_until at read time and never written
    - short_code is unique within the organization, qr_code is globally unique
    - Never deleted, only terminally stated
    """

    __tablename__ = "invitations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    unit_id: UUID = Field(foreign_key="units.id", nullable=False, index=True)
    created_by: UUID = Field(nullable=False)

    visitor_name: str = Field(max_length=255, nullable=False)
    visitor_phone: Optional[str] = Field(default=None, max_length=50)
    visitor_email: Optional[str] = Field(default=None, max_length=255)
    vehicle_plate: Optional[str] = Field(default=None, max_length=20)
    notes: Optional[str] = Field(default=None)

    access_type: AccessType = Field(nullable=False)
    max_uses: Optional[int] = Field(default=None)
    current_uses: int = Field(default=0, nullable=False)

    valid_from: datetime = Field(sa_column=Column(DateTime, nullable=False))
    valid_until: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime, nullable=True)
    )

    short_code: str = Field(max_length=16, nullable=False)
    qr_code: str = Field(max_length=255, unique=True, nullable=False)

    status: InvitationStatus = Field(default=InvitationStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_invitation_org_short_code", "organization_id", "short_code", unique=True),
        Index("idx_invitation_valid_until", "valid_until"),
        Index("idx_invitation_status", "status"),
    )
