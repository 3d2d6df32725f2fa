"""
Membership Entity

Links a user to an organization with a role and, for residents, a unit.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now

from .enums import MembershipRole, MembershipStatus


class Membership(SQLModel, table=True):
    """
    Membership entity - links a user to an organization with a role.

    Business Rules:
    - One user can be member of multiple organizations
    - (user_id, organization_id) must be unique
    - Revoked memberships block every gate and invitation operation
    - Residents act on behalf of their unit_id only
    """

    __tablename__ = "memberships"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: UUID = Field(nullable=False, index=True)
    organization_id: UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    unit_id: Optional[UUID] = Field(default=None, foreign_key="units.id")

    role: MembershipRole = Field(nullable=False)
    status: MembershipStatus = Field(default=MembershipStatus.active)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_membership_user_org", "user_id", "organization_id", unique=True),
        Index("idx_membership_status", "status"),
    )
