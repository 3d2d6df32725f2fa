from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Invitation


class IInvitationRepository(ABC):
    """Invitation repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, invitation_id: UUID) -> Optional[Invitation]:
        """Get invitation by ID"""
        pass

    @abstractmethod
    async def get_by_short_code(
        self, organization_id: UUID, short_code: str
    ) -> Optional[Invitation]:
        """Get invitation by short code within an organization (exact match)"""
        pass

    @abstractmethod
    async def short_code_exists(self, organization_id: UUID, short_code: str) -> bool:
        """Check whether a short code is already taken in an organization"""
        pass

    @abstractmethod
    async def list_by_organization(
        self, organization_id: UUID, unit_id: Optional[UUID] = None
    ) -> List[Invitation]:
        """Get invitations of an organization, newest first, optionally for one unit"""
        pass

    @abstractmethod
    async def create(self, invitation: Invitation) -> Invitation:
        """Create a new invitation"""
        pass

    @abstractmethod
    async def cancel(self, invitation_id: UUID, now: datetime) -> bool:
        """
        Cancel an invitation only if it is still active at `now`.

        Same single conditional update as consume, so a use committed by a
        guard in the meantime is never overwritten.

        Returns:
            True when the row was cancelled, False otherwise.
        """
        pass

    @abstractmethod
    async def consume(self, invitation_id: UUID) -> Optional[int]:
        """
        Atomically use one grant of an invitation.

        Implementations must perform a single conditional update
        (status active and uses below max_uses) and decide on the affected
        row count, never read-compare-write.

        Returns:
            The new current_uses value, or None when no row was updated
            (exhausted, no longer active, or missing).
        """
        pass
