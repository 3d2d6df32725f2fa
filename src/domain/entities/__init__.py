"""
Gate Access Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    AccessDirection,
    AccessMethod,
    AccessType,
    InvitationStatus,
    MembershipRole,
    MembershipStatus,
)

# Export all entities
from .organization import Organization
from .unit import Unit
from .membership import Membership
from .invitation import Invitation
from .access_log import AccessLogEntry
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AccessDirection",
    "AccessMethod",
    "AccessType",
    "InvitationStatus",
    "MembershipRole",
    "MembershipStatus",
    # Entities
    "Organization",
    "Unit",
    "Membership",
    "Invitation",
    "AccessLogEntry",
    "AuditEvent",
]
