"""
Unit tests for Authorize Access Use Case
"""

import asyncio
import pytest
from datetime import timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

from sqlalchemy.exc import OperationalError

from src.app.use_cases.access import AuthorizeAccessUseCase, DenialReason
from src.domain.base import utc_now
from src.domain.entities import (
    AccessDirection,
    AccessMethod,
    AccessType,
    InvitationStatus,
    MembershipRole,
)


@pytest.fixture
def organization_id():
    return uuid4()


@pytest.fixture
def guard(as_member, organization_id):
    return as_member(MembershipRole.guard, organization_id)


def _store(mock_uow, invitation):
    mock_uow.invitations.get_by_id = AsyncMock(return_value=invitation)
    mock_uow.invitations.get_by_short_code = AsyncMock(return_value=invitation)
    mock_uow.invitations.consume = AsyncMock(
        return_value=invitation.current_uses + 1 if invitation else None
    )
    mock_uow.access_logs.create = AsyncMock(side_effect=lambda entry: entry)


@pytest.mark.asyncio
async def test_grant_by_short_code(mock_uow, codec, guard, organization_id, make_invitation):
    """Single-use invitation is granted once and reported as used"""
    invitation = make_invitation(organization_id)
    _store(mock_uow, invitation)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "abc234", "entry")

    assert result.is_ok()
    outcome = result.value
    assert outcome.granted is True
    assert outcome.reason is None
    assert outcome.log_id is not None
    assert outcome.warning is None
    assert outcome.invitation.current_uses == 1
    assert outcome.invitation.status == "used"

    mock_uow.invitations.get_by_short_code.assert_called_once_with(organization_id, "ABC234")
    mock_uow.invitations.consume.assert_called_once_with(invitation.id)

    entry = mock_uow.access_logs.create.call_args.args[0]
    assert entry.invitation_id == invitation.id
    assert entry.unit_id == invitation.unit_id
    assert entry.access_type == AccessDirection.entry
    assert entry.method == AccessMethod.manual_code
    assert entry.authorized_by == guard.user_id


@pytest.mark.asyncio
async def test_grant_by_qr_logs_qr_scan(mock_uow, codec, guard, organization_id, make_invitation):
    invitation = make_invitation(
        organization_id, access_type=AccessType.multiple, max_uses=3, current_uses=1
    )
    _store(mock_uow, invitation)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, invitation.qr_code, "exit")

    assert result.is_ok()
    assert result.value.granted is True
    assert result.value.invitation.current_uses == 2
    assert result.value.invitation.status == "active"
    mock_uow.invitations.get_by_id.assert_called_once_with(invitation.id)

    entry = mock_uow.access_logs.create.call_args.args[0]
    assert entry.method == AccessMethod.qr_scan
    assert entry.access_type == AccessDirection.exit


@pytest.mark.asyncio
async def test_consume_commits_before_log_append(mock_uow, codec, guard, organization_id, make_invitation):
    """The use is committed even if nothing after it succeeds"""
    invitation = make_invitation(organization_id)
    _store(mock_uow, invitation)
    calls = []
    mock_uow.commit = AsyncMock(side_effect=lambda: calls.append("commit"))
    mock_uow.access_logs.create = AsyncMock(
        side_effect=lambda entry: calls.append("log") or entry
    )

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    await use_case.execute(guard.user_id, organization_id, "ABC234", "entry")

    assert calls == ["commit", "log", "commit"]


@pytest.mark.asyncio
async def test_lost_race_is_already_exhausted(mock_uow, codec, guard, organization_id, make_invitation):
    """Conditional update matching no row denies the scan"""
    invitation = make_invitation(organization_id)
    _store(mock_uow, invitation)
    mock_uow.invitations.consume = AsyncMock(return_value=None)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "ABC234", "entry")

    assert result.is_ok()
    assert result.value.granted is False
    assert result.value.reason == DenialReason.already_exhausted
    mock_uow.access_logs.create.assert_not_called()
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_log_failure_still_grants_with_warning(mock_uow, codec, guard, organization_id, make_invitation):
    invitation = make_invitation(organization_id)
    _store(mock_uow, invitation)
    mock_uow.access_logs.create = AsyncMock(
        side_effect=OperationalError("INSERT", {}, Exception("disk I/O error"))
    )

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "ABC234", "entry")

    assert result.is_ok()
    assert result.value.granted is True
    assert result.value.warning == "LOG_WRITE_FAILED"
    assert result.value.log_id is None
    assert result.value.invitation.current_uses == 1
    mock_uow.rollback.assert_called_once()


@pytest.mark.asyncio
async def test_slow_lookup_times_out_without_consuming(mock_uow, codec, guard, organization_id, make_invitation):
    """The timeout covers the checks before the consume"""
    invitation = make_invitation(organization_id)
    _store(mock_uow, invitation)

    async def slow_lookup(*args):
        await asyncio.sleep(1)
        return invitation

    mock_uow.invitations.get_by_short_code = AsyncMock(side_effect=slow_lookup)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec, timeout=0.05)
    result = await use_case.execute(guard.user_id, organization_id, "ABC234", "entry")

    assert result.is_ok()
    assert result.value.granted is False
    assert result.value.reason == DenialReason.timeout
    mock_uow.invitations.consume.assert_not_called()
    mock_uow.commit.assert_not_called()
    mock_uow.access_logs.create.assert_not_called()


@pytest.mark.asyncio
async def test_slow_log_write_after_consume_still_logs(mock_uow, codec, guard, organization_id, make_invitation):
    """Once the use is committed the timeout no longer applies"""
    invitation = make_invitation(organization_id)
    _store(mock_uow, invitation)

    async def slow_create(entry):
        await asyncio.sleep(0.2)
        return entry

    mock_uow.access_logs.create = AsyncMock(side_effect=slow_create)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec, timeout=0.05)
    result = await use_case.execute(guard.user_id, organization_id, "ABC234", "entry")

    assert result.is_ok()
    assert result.value.granted is True
    assert result.value.log_id is not None
    assert result.value.warning is None
    mock_uow.access_logs.create.assert_awaited_once()


@pytest.mark.asyncio
async def test_tampered_qr_is_invalid_credential(mock_uow, codec, guard, organization_id, make_invitation):
    invitation = make_invitation(organization_id)
    _store(mock_uow, invitation)
    tampered = invitation.qr_code[:-1] + ("0" if invitation.qr_code[-1] != "0" else "1")

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, tampered, "entry")

    assert result.is_ok()
    assert result.value.granted is False
    assert result.value.reason == DenialReason.invalid_credential
    assert result.value.detail == "tampered"
    mock_uow.invitations.get_by_id.assert_not_called()
    mock_uow.invitations.consume.assert_not_called()


@pytest.mark.asyncio
async def test_malformed_qr_is_invalid_credential(mock_uow, codec, guard, organization_id):
    mock_uow.invitations.consume = AsyncMock()

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "KASETA:garbage", "entry")

    assert result.value.granted is False
    assert result.value.reason == DenialReason.invalid_credential
    assert result.value.detail == "malformed"
    mock_uow.invitations.consume.assert_not_called()


@pytest.mark.asyncio
async def test_unknown_short_code_is_not_found(mock_uow, codec, guard, organization_id):
    mock_uow.invitations.get_by_short_code = AsyncMock(return_value=None)
    mock_uow.invitations.consume = AsyncMock()

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "ZZZ999", "entry")

    assert result.value.granted is False
    assert result.value.reason == DenialReason.not_found
    mock_uow.invitations.consume.assert_not_called()


@pytest.mark.asyncio
async def test_other_organization_qr_is_not_found(mock_uow, codec, guard, organization_id, make_invitation):
    """A valid QR from another community does not open this gate"""
    invitation = make_invitation(uuid4())
    _store(mock_uow, invitation)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, invitation.qr_code, "entry")

    assert result.value.granted is False
    assert result.value.reason == DenialReason.not_found
    mock_uow.invitations.consume.assert_not_called()


@pytest.mark.asyncio
async def test_expired_is_not_active(mock_uow, codec, guard, organization_id, make_invitation):
    now = utc_now()
    invitation = make_invitation(
        organization_id,
        valid_from=now - timedelta(days=2),
        valid_until=now - timedelta(seconds=1),
    )
    _store(mock_uow, invitation)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "ABC234", "entry", now=now)

    assert result.value.granted is False
    assert result.value.reason == DenialReason.invitation_not_active
    assert result.value.detail == "expired"
    assert result.value.invitation.status == "expired"
    mock_uow.invitations.consume.assert_not_called()


@pytest.mark.asyncio
async def test_cancelled_is_not_active(mock_uow, codec, guard, organization_id, make_invitation):
    invitation = make_invitation(organization_id, status=InvitationStatus.cancelled)
    _store(mock_uow, invitation)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "ABC234", "entry")

    assert result.value.granted is False
    assert result.value.reason == DenialReason.invitation_not_active
    assert result.value.detail == "cancelled"


@pytest.mark.asyncio
async def test_used_is_already_exhausted(mock_uow, codec, guard, organization_id, make_invitation):
    invitation = make_invitation(
        organization_id, current_uses=1, status=InvitationStatus.used
    )
    _store(mock_uow, invitation)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "ABC234", "exit")

    assert result.value.reason == DenialReason.already_exhausted
    assert result.value.detail == "used"


@pytest.mark.asyncio
async def test_future_invitation_is_not_yet_valid(mock_uow, codec, guard, organization_id, make_invitation):
    now = utc_now()
    invitation = make_invitation(
        organization_id,
        valid_from=now + timedelta(hours=2),
        valid_until=now + timedelta(hours=4),
    )
    _store(mock_uow, invitation)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(guard.user_id, organization_id, "ABC234", "entry", now=now)

    assert result.value.granted is False
    assert result.value.reason == DenialReason.invitation_not_yet_valid
    assert result.value.invitation.status == "active"
    mock_uow.invitations.consume.assert_not_called()


@pytest.mark.asyncio
async def test_invalid_direction(mock_uow, codec, organization_id):
    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(uuid4(), organization_id, "ABC234", "sideways")

    assert result.is_err()
    assert result.error.code == "INVALID_DIRECTION"
    mock_uow.__aenter__.assert_not_called()


@pytest.mark.asyncio
async def test_resident_cannot_scan(mock_uow, codec, as_member, organization_id):
    resident = as_member(MembershipRole.resident, organization_id, unit_id=uuid4())

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(resident.user_id, organization_id, "ABC234", "entry")

    assert result.is_err()
    assert result.error.code == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_non_member_cannot_scan(mock_uow, codec, organization_id):
    mock_uow.memberships.get_by_user_and_organization = AsyncMock(return_value=None)

    use_case = AuthorizeAccessUseCase(mock_uow, codec=codec)
    result = await use_case.execute(uuid4(), organization_id, "ABC234", "entry")

    assert result.is_err()
    assert result.error.code == "NOT_A_MEMBER"
