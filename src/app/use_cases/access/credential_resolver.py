"""
Credential resolution: presented credential -> invitation.

A single dispatch point over the credential kind, always scoped to the
guard's organization.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.invitation_codec import Credential, CredentialKind, InvitationCodec
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import Invitation


async def find_by_credential(
    uow: UnitOfWork,
    codec: InvitationCodec,
    organization_id: UUID,
    credential: Credential,
) -> Result[Invitation]:
    """
    Resolve a credential to its invitation.

    Returns:
        Result with the Invitation, or Error CREDENTIAL_MALFORMED,
        CREDENTIAL_TAMPERED or INVITATION_NOT_FOUND
    """
    if credential.kind == CredentialKind.qr:
        decoded = codec.decode(credential.value)
        if decoded.is_err():
            return decoded
        invitation = await uow.invitations.get_by_id(decoded.value)
    else:
        invitation = await uow.invitations.get_by_short_code(
            organization_id, credential.value.upper()
        )

    if invitation is None or invitation.organization_id != organization_id:
        return Return.err(Error("INVITATION_NOT_FOUND", "Invitation not found"))

    return Return.ok(invitation)
