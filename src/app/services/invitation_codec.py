"""
Invitation Credential Codec

Builds and checks the two credentials a visitor can present at the gate:
a signed QR payload and a short human code.

QR payload format: ``<PREFIX>:<invitation uuid>.<signature>`` where the
signature is the first 32 hex chars of HMAC-SHA256(secret, uuid).
"""

import hashlib
import hmac
import secrets
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from libs.result import Error, Result, Return

SHORT_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"  # no 0/O, 1/I
SIGNATURE_LENGTH = 32
HEX_DIGITS = frozenset("0123456789abcdef")


class CredentialKind(str, Enum):
    qr = "qr"
    short_code = "short_code"


class Credential(BaseModel):
    """A presented credential, tagged once at the boundary"""

    kind: CredentialKind
    value: str


class InvitationCredentials(BaseModel):
    qr_payload: str
    short_code: str


class InvitationCodec:
    """Encode/decode invitation credentials"""

    def __init__(self, secret: str, prefix: str = "KASETA", short_code_length: int = 6):
        self.secret = secret.encode("utf-8")
        self.prefix = prefix
        self.short_code_length = short_code_length

    @classmethod
    def from_config(cls, config=None) -> "InvitationCodec":
        if config is None:
            from config import ApplicationConfig as config
        return cls(
            secret=config.QR_SIGNING_SECRET,
            prefix=config.QR_PREFIX,
            short_code_length=config.SHORT_CODE_LENGTH,
        )

    def parse(self, raw: str) -> Credential:
        """Tag a raw scanned/typed string as a QR payload or a short code."""
        value = raw.strip()
        if value.startswith(f"{self.prefix}:"):
            return Credential(kind=CredentialKind.qr, value=value)
        return Credential(kind=CredentialKind.short_code, value=value.upper())

    def new_short_code(self) -> str:
        return "".join(
            secrets.choice(SHORT_CODE_ALPHABET) for _ in range(self.short_code_length)
        )

    def sign(self, invitation_id: UUID) -> str:
        digest = hmac.new(
            self.secret, str(invitation_id).encode("utf-8"), hashlib.sha256
        ).hexdigest()
        return digest[:SIGNATURE_LENGTH]

    def encode(
        self, invitation_id: UUID, short_code: Optional[str] = None
    ) -> InvitationCredentials:
        """
        Produce both credentials for an invitation.

        Args:
            invitation_id: Invitation UUID embedded in the QR payload
            short_code: Pre-reserved short code; a fresh one is drawn if omitted

        Returns:
            InvitationCredentials with qr_payload and short_code
        """
        qr_payload = f"{self.prefix}:{invitation_id}.{self.sign(invitation_id)}"
        return InvitationCredentials(
            qr_payload=qr_payload,
            short_code=short_code or self.new_short_code(),
        )

    def decode(self, qr_payload: str) -> Result[UUID]:
        """
        Recover the invitation id from a QR payload.

        Returns:
            Result with the invitation UUID, or Error CREDENTIAL_MALFORMED /
            CREDENTIAL_TAMPERED
        """
        malformed = Return.err(
            Error("CREDENTIAL_MALFORMED", "QR code is not a valid invitation")
        )

        head = f"{self.prefix}:"
        if not qr_payload.startswith(head):
            return malformed

        id_part, sep, signature = qr_payload[len(head):].partition(".")
        if not sep or len(signature) != SIGNATURE_LENGTH:
            return malformed
        if any(c not in HEX_DIGITS for c in signature):
            return malformed

        try:
            invitation_id = UUID(id_part)
        except ValueError:
            return malformed
        # Only the canonical form is signed
        if str(invitation_id) != id_part:
            return malformed

        if not hmac.compare_digest(signature, self.sign(invitation_id)):
            return Return.err(
                Error("CREDENTIAL_TAMPERED", "QR code signature does not match")
            )

        return Return.ok(invitation_id)
