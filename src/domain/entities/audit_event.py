"""
AuditEvent Entity

Immutable log of administrative invitation actions.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utc_now


class AuditEvent(SQLModel, table=True):
    """
    AuditEvent entity - immutable log of invitation lifecycle actions.

    Business Rules:
    - Immutable (never updated or deleted)
    - Gate entries/exits go to access_logs, not here
    - Metadata stores additional context (invitation id, short code, unit)
    """

    __tablename__ = "audit_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: Optional[UUID] = Field(default=None, index=True)
    user_id: Optional[UUID] = Field(default=None, index=True)

    action: str = Field(max_length=100)  # e.g., "invitation_created"
    event_metadata: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_audit_created_at", "created_at"),
        Index("idx_audit_org_action", "organization_id", "action"),
    )
