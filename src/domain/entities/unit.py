"""
Unit Entity

A dwelling inside an organization (apartment, house, office).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now


class Unit(SQLModel, table=True):
    """
    Unit entity - addressable dwelling inside an organization.

    Business Rules:
    - (organization_id, unit_number, building) is unique
    - Guards refer to units by "<unit_number>" or "<building>-<unit_number>"
    """

    __tablename__ = "units"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    organization_id: UUID = Field(
        foreign_key="organizations.id", nullable=False, index=True
    )
    unit_number: str = Field(max_length=50, nullable=False)
    building: Optional[str] = Field(default=None, max_length=100)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index(
            "idx_unit_org_number_building",
            "organization_id",
            "unit_number",
            "building",
            unique=True,
        ),
    )
