"""
Organization Entity

A residential community: the scope of every unit, invitation and gate event.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utc_now


class Organization(SQLModel, table=True):
    __tablename__ = "organizations"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=100, unique=True, index=True)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
