"""
Gate Access Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class MembershipRole(str, Enum):
    """Member role within an organization"""

    owner = "owner"
    admin = "admin"
    guard = "guard"
    resident = "resident"


class MembershipStatus(str, Enum):
    """Membership status"""

    active = "active"
    invited = "invited"
    revoked = "revoked"


class AccessType(str, Enum):
    """How many times and for how long an invitation may be consumed"""

    single = "single"
    multiple = "multiple"
    permanent = "permanent"
    temporary = "temporary"


class InvitationStatus(str, Enum):
    """Invitation status (stored terminal flags plus time-derived expiry)"""

    active = "active"
    used = "used"
    expired = "expired"
    cancelled = "cancelled"


class AccessDirection(str, Enum):
    """Direction of a gate event"""

    entry = "entry"
    exit = "exit"


class AccessMethod(str, Enum):
    """How the visitor was identified at the gate"""

    qr_scan = "qr_scan"
    manual_code = "manual_code"
    manual_entry = "manual_entry"
    plate_recognition = "plate_recognition"
