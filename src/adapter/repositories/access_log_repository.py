import base64
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, or_
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.access_log_repository import IAccessLogRepository
from src.domain.entities import AccessLogEntry


def encode_cursor(entry: AccessLogEntry) -> str:
    """Cursor format: urlsafe base64 of "<accessed_at ISO>|<id>" """
    raw = f"{entry.accessed_at.isoformat()}|{entry.id}"
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("utf-8")


def decode_cursor(cursor: str) -> Tuple[datetime, UUID]:
    """Raises ValueError for anything encode_cursor did not produce"""
    raw = base64.urlsafe_b64decode(cursor.encode("utf-8")).decode("utf-8")
    timestamp, separator, entry_id = raw.partition("|")
    if not separator:
        raise ValueError("cursor is missing the entry id")
    return datetime.fromisoformat(timestamp), UUID(entry_id)


class AccessLogRepository(IAccessLogRepository):
    """AccessLogEntry repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, entry: AccessLogEntry) -> AccessLogEntry:
        """Append a new access log entry (immutable)"""
        self.session.add(entry)
        await self.session.flush()
        await self.session.refresh(entry)
        return entry

    async def get_by_organization_paginated(
        self,
        organization_id: UUID,
        limit: int = 50,
        cursor: Optional[str] = None,
        unit_id: Optional[UUID] = None,
        invitation_id: Optional[UUID] = None,
    ) -> Tuple[List[AccessLogEntry], Optional[str]]:
        """
        Get access log entries with cursor-based pagination.

        Ordered by (accessed_at, id) descending so entries sharing a
        timestamp are neither skipped nor repeated across pages.
        """
        stmt = select(AccessLogEntry).where(
            AccessLogEntry.organization_id == organization_id
        )
        if unit_id is not None:
            stmt = stmt.where(AccessLogEntry.unit_id == unit_id)
        if invitation_id is not None:
            stmt = stmt.where(AccessLogEntry.invitation_id == invitation_id)

        if cursor:
            cursor_timestamp, cursor_id = decode_cursor(cursor)
            stmt = stmt.where(
                or_(
                    AccessLogEntry.accessed_at < cursor_timestamp,
                    and_(
                        AccessLogEntry.accessed_at == cursor_timestamp,
                        AccessLogEntry.id < cursor_id,
                    ),
                )
            )

        stmt = stmt.order_by(
            AccessLogEntry.accessed_at.desc(), AccessLogEntry.id.desc()
        ).limit(limit + 1)

        result = await self.session.exec(stmt)
        entries = list(result.all())

        has_more = len(entries) > limit
        if has_more:
            entries = entries[:limit]

        next_cursor = encode_cursor(entries[-1]) if has_more and entries else None

        return entries, next_cursor
