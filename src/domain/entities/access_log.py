"""
AccessLogEntry Entity

Immutable ledger of every gate entry/exit that was let through.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now

from .enums import AccessDirection, AccessMethod


class AccessLogEntry(SQLModel, table=True):
    """
    AccessLogEntry entity - one row per authorized gate event.

    Business Rules:
    - Append-only (never updated or deleted)
    - accessed_at is always set by the server
    - invitation_id is NULL for manual entries
    - unit_id is NULL only when the unit could not be resolved
    """

    __tablename__ = "access_logs"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    unit_id: Optional[UUID] = Field(default=None, foreign_key="units.id", index=True)
    invitation_id: Optional[UUID] = Field(
        default=None, foreign_key="invitations.id", index=True
    )

    visitor_name: str = Field(max_length=255, nullable=False)
    visitor_phone: Optional[str] = Field(default=None, max_length=50)
    vehicle_plate: Optional[str] = Field(default=None, max_length=20)

    access_type: AccessDirection = Field(nullable=False)
    method: AccessMethod = Field(nullable=False)

    authorized_by: UUID = Field(nullable=False)
    notes: Optional[str] = Field(default=None)

    accessed_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_access_log_accessed_at", "accessed_at"),
        Index("idx_access_log_org_accessed_at", "organization_id", "accessed_at"),
    )
