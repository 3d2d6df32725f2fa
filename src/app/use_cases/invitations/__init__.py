"""
Invitation Use Cases

Invitation lifecycle: creation, reads and cancellation.
"""

from .cancel_invitation_use_case import CancelInvitationUseCase
from .create_invitation_use_case import CreateInvitationUseCase
from .dtos import (
    CancelInvitationResponse,
    CreateInvitationCommand,
    InvitationListResponse,
    InvitationResponse,
)
from .get_invitation_use_case import GetInvitationUseCase
from .list_invitations_use_case import ListInvitationsUseCase

__all__ = [
    "CreateInvitationUseCase",
    "GetInvitationUseCase",
    "ListInvitationsUseCase",
    "CancelInvitationUseCase",
    "CreateInvitationCommand",
    "InvitationResponse",
    "InvitationListResponse",
    "CancelInvitationResponse",
]
