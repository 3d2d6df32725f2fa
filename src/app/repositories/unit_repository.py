from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Unit


class IUnitRepository(ABC):
    """Unit repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, unit_id: UUID) -> Optional[Unit]:
        """Get unit by ID"""
        pass

    @abstractmethod
    async def find_by_number(
        self, organization_id: UUID, unit_number: str, building: Optional[str] = None
    ) -> List[Unit]:
        """
        Find units by number (case-insensitive) within an organization.

        When building is None every building is matched.
        """
        pass
