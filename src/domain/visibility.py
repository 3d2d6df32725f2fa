"""
Invitation Status Projection

The single source of truth for whether an invitation can be presented at the
gate. Both the scan flow and every listing use it.
"""

from datetime import datetime
from typing import Optional

from src.domain.base import to_naive_utc, utc_now
from src.domain.entities import Invitation, InvitationStatus


def derive_status(
    invitation: Invitation, now: Optional[datetime] = None
) -> InvitationStatus:
    """
    Compute the effective status of an invitation without touching storage.

    Order matters: cancelled and used are terminal and win over expiry;
    expiry is derived from valid_until and is never persisted.
    """
    if invitation.status == InvitationStatus.cancelled:
        return InvitationStatus.cancelled
    if invitation.status == InvitationStatus.used:
        return InvitationStatus.used

    now = to_naive_utc(now) if now is not None else utc_now()
    valid_until = to_naive_utc(invitation.valid_until)
    if valid_until is not None and now > valid_until:
        return InvitationStatus.expired

    return InvitationStatus.active


def is_not_yet_valid(invitation: Invitation, now: Optional[datetime] = None) -> bool:
    """True while valid_from is still in the future."""
    now = to_naive_utc(now) if now is not None else utc_now()
    return now < to_naive_utc(invitation.valid_from)
