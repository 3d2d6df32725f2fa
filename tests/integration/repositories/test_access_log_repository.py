import pytest
from datetime import datetime

from src.adapter.repositories.access_log_repository import AccessLogRepository
from src.domain.entities import AccessDirection, AccessLogEntry, AccessMethod


async def _log(db_session, community, visitor_name: str, accessed_at: datetime) -> AccessLogEntry:
    entry = AccessLogEntry(
        organization_id=community["organization"].id,
        unit_id=community["units"]["a101"].id,
        visitor_name=visitor_name,
        access_type=AccessDirection.entry,
        method=AccessMethod.manual_entry,
        authorized_by=community["members"]["guard1"].user_id,
        accessed_at=accessed_at,
    )
    db_session.add(entry)
    await db_session.commit()
    return entry


@pytest.mark.asyncio
async def test_pages_through_entries_sharing_a_timestamp(db_session, community):
    """Guards logging in the same instant: every entry shows up exactly once"""
    same_instant = datetime(2026, 3, 1, 9, 30, 0)
    names = {"a", "b", "c"}
    for name in sorted(names):
        await _log(db_session, community, name, same_instant)
    await _log(db_session, community, "earlier", datetime(2026, 3, 1, 8, 0, 0))

    repo = AccessLogRepository(db_session)
    seen = []
    cursor = None
    while True:
        entries, cursor = await repo.get_by_organization_paginated(
            community["organization"].id, limit=1, cursor=cursor
        )
        seen.extend(entry.visitor_name for entry in entries)
        if cursor is None:
            break

    assert len(seen) == 4
    assert set(seen[:3]) == names
    assert seen[3] == "earlier"


@pytest.mark.asyncio
async def test_undecodable_cursor_is_rejected(db_session, community):
    repo = AccessLogRepository(db_session)

    with pytest.raises(ValueError):
        await repo.get_by_organization_paginated(
            community["organization"].id, cursor="not-a-cursor"
        )
