"""
Role capabilities for invitation and gate operations.
"""

from enum import Enum
from typing import Dict, FrozenSet

from src.domain.entities import MembershipRole


class Permission(str, Enum):
    invitations_create = "invitations.create"
    invitations_view_unit = "invitations.view.unit"
    invitations_view_all = "invitations.view.all"
    invitations_cancel = "invitations.cancel"
    invitations_cancel_all = "invitations.cancel.all"
    access_scan = "access.scan"
    access_manual = "access.manual"
    access_logs_view = "access.logs.view"


_STAFF: FrozenSet[Permission] = frozenset(Permission)

ROLE_PERMISSIONS: Dict[MembershipRole, FrozenSet[Permission]] = {
    MembershipRole.owner: _STAFF,
    MembershipRole.admin: _STAFF,
    MembershipRole.guard: frozenset(
        {
            Permission.invitations_view_unit,
            Permission.invitations_view_all,
            Permission.access_scan,
            Permission.access_manual,
            Permission.access_logs_view,
        }
    ),
    MembershipRole.resident: frozenset(
        {
            Permission.invitations_create,
            Permission.invitations_view_unit,
            Permission.invitations_cancel,
        }
    ),
}


def has_permission(role: MembershipRole, permission: Permission) -> bool:
    return permission in ROLE_PERMISSIONS.get(role, frozenset())
