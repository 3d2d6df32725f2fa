from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from uuid import UUID

from src.domain.entities import AccessLogEntry


class IAccessLogRepository(ABC):
    """AccessLogEntry repository interface - append and read only"""

    @abstractmethod
    async def create(self, entry: AccessLogEntry) -> AccessLogEntry:
        """Append a new access log entry (immutable)"""
        pass

    @abstractmethod
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

        Returns:
            Tuple of (entries list, next_cursor)
            - entries: ordered by accessed_at DESC, then id DESC
            - next_cursor: Cursor for next page, None if no more entries

        Raises:
            ValueError: cursor cannot be decoded
        """
        pass
