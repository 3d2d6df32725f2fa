from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.unit_repository import IUnitRepository
from src.domain.entities import Unit


class UnitRepository(IUnitRepository):
    """Unit repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, unit_id: UUID) -> Optional[Unit]:
        """Get unit by ID"""
        stmt = select(Unit).where(Unit.id == unit_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_number(
        self, organization_id: UUID, unit_number: str, building: Optional[str] = None
    ) -> List[Unit]:
        """Find units by number (case-insensitive) within an organization"""
        stmt = select(Unit).where(
            Unit.organization_id == organization_id,
            func.lower(Unit.unit_number) == unit_number.lower(),
        )
        if building is not None:
            stmt = stmt.where(func.lower(Unit.building) == building.lower())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
