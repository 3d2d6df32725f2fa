import pytest
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from src.app.services.invitation_codec import InvitationCodec
from src.domain.entities import Membership, MembershipRole, MembershipStatus


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def codec():
    return InvitationCodec("unit-test-secret")


@pytest.fixture
def as_member(mock_uow):
    """Install the caller's membership on the mocked unit of work."""

    def _as_member(role: MembershipRole, organization_id, unit_id=None, user_id=None, status=MembershipStatus.active):
        membership = Membership(
            user_id=user_id or uuid4(),
            organization_id=organization_id,
            unit_id=unit_id,
            role=role,
            status=status,
        )
        mock_uow.memberships.get_by_user_and_organization = AsyncMock(return_value=membership)
        return membership

    return _as_member


@pytest.fixture
def make_invitation(codec):
    """Build an in-memory active invitation with real credentials."""
    from datetime import timedelta

    from src.domain.base import utc_now
    from src.domain.entities import AccessType, Invitation, InvitationStatus

    def _make_invitation(organization_id, **overrides):
        invitation_id = overrides.pop("id", uuid4())
        credentials = codec.encode(invitation_id, overrides.pop("short_code", "ABC234"))
        now = utc_now()
        fields = dict(
            id=invitation_id,
            organization_id=organization_id,
            unit_id=uuid4(),
            created_by=uuid4(),
            visitor_name="Ana",
            access_type=AccessType.single,
            max_uses=1,
            current_uses=0,
            valid_from=now - timedelta(minutes=5),
            valid_until=now + timedelta(hours=1),
            short_code=credentials.short_code,
            qr_code=credentials.qr_payload,
            status=InvitationStatus.active,
            created_at=now,
            updated_at=now,
        )
        fields.update(overrides)
        return Invitation(**fields)

    return _make_invitation
