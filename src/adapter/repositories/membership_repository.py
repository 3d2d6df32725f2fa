from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.membership_repository import IMembershipRepository
from src.domain.entities import Membership


class MembershipRepository(IMembershipRepository):
    """Membership repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_and_organization(
        self, user_id: UUID, organization_id: UUID
    ) -> Optional[Membership]:
        """Get membership by user and organization"""
        stmt = select(Membership).where(
            Membership.user_id == user_id,
            Membership.organization_id == organization_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
