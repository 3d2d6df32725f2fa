"""
Helpers shared by use cases that act on behalf of an organization member.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Membership, MembershipStatus


async def get_active_membership(
    uow: UnitOfWork, user_id: UUID, organization_id: UUID
) -> Result[Membership]:
    """Load the caller's membership; missing or revoked means NOT_A_MEMBER."""
    membership = await uow.memberships.get_by_user_and_organization(
        user_id, organization_id
    )
    if membership is None or membership.status != MembershipStatus.active:
        return Return.err(
            Error("NOT_A_MEMBER", "You are not an active member of this organization")
        )
    return Return.ok(membership)
