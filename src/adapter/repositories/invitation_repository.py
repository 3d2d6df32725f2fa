from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, case, func, or_, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.invitation_repository import IInvitationRepository
from src.domain.base import to_naive_utc, utc_now
from src.domain.entities import Invitation, InvitationStatus


class InvitationRepository(IInvitationRepository):
    """Invitation repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, invitation_id: UUID) -> Optional[Invitation]:
        """Get invitation by ID"""
        stmt = select(Invitation).where(Invitation.id == invitation_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_short_code(
        self, organization_id: UUID, short_code: str
    ) -> Optional[Invitation]:
        """Get invitation by short code within an organization"""
        stmt = select(Invitation).where(
            Invitation.organization_id == organization_id,
            func.upper(Invitation.short_code) == short_code.upper(),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def short_code_exists(self, organization_id: UUID, short_code: str) -> bool:
        """Check whether a short code is already taken in an organization"""
        stmt = select(Invitation.id).where(
            Invitation.organization_id == organization_id,
            func.upper(Invitation.short_code) == short_code.upper(),
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def list_by_organization(
        self, organization_id: UUID, unit_id: Optional[UUID] = None
    ) -> List[Invitation]:
        """Get invitations of an organization, newest first"""
        stmt = select(Invitation).where(Invitation.organization_id == organization_id)
        if unit_id is not None:
            stmt = stmt.where(Invitation.unit_id == unit_id)
        stmt = stmt.order_by(Invitation.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation"""
        self.session.add(invitation)
        await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def cancel(self, invitation_id: UUID, now: datetime) -> bool:
        """Cancel with a conditional UPDATE; expiry is checked against `now`"""
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == invitation_id,
                Invitation.status == InvitationStatus.active,
                or_(
                    Invitation.valid_until.is_(None),
                    Invitation.valid_until >= to_naive_utc(now),
                ),
            )
            .values(status=InvitationStatus.cancelled.value, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self._reload(invitation_id)
        return result.rowcount == 1

    async def consume(self, invitation_id: UUID) -> Optional[int]:
        """
        Use one grant with a single conditional UPDATE.

        The WHERE clause carries the whole eligibility check, so two guards
        racing on a single-use invitation cannot both match the row.
        """
        new_uses = Invitation.current_uses + 1
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == invitation_id,
                Invitation.status == InvitationStatus.active,
                or_(
                    Invitation.max_uses.is_(None),
                    Invitation.current_uses < Invitation.max_uses,
                ),
            )
            .values(
                current_uses=new_uses,
                status=case(
                    (
                        and_(
                            Invitation.max_uses.is_not(None),
                            new_uses >= Invitation.max_uses,
                        ),
                        InvitationStatus.used.value,
                    ),
                    else_=Invitation.status,
                ),
                updated_at=utc_now(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None

        return (await self._reload(invitation_id)).current_uses

    async def _reload(self, invitation_id: UUID) -> Optional[Invitation]:
        # Bring any already-loaded instance in line with the row
        refreshed = await self.session.execute(
            select(Invitation)
            .where(Invitation.id == invitation_id)
            .execution_options(populate_existing=True)
        )
        return refreshed.scalar_one_or_none()
