"""
List Access Logs Use Case

Reads the gate ledger with cursor pagination.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import get_active_membership
from src.domain.permissions import Permission, has_permission

from .dtos import AccessLogPageResponse, AccessLogResponse


class ListAccessLogsUseCase:
    """
    Use case for reading access logs.

    Business Rules:
    - access.logs.view sees the whole organization
    - Other members with a unit see only their unit's entries
    - Results ordered by newest first, cursor-based pagination
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        organization_id: UUID,
        limit: int = 50,
        cursor: Optional[str] = None,
        unit_id: Optional[UUID] = None,
        invitation_id: Optional[UUID] = None,
    ) -> Result[AccessLogPageResponse]:
        async with self.uow:
            membership_result = await get_active_membership(
                self.uow, user_id, organization_id
            )
            if membership_result.is_err():
                return membership_result
            membership = membership_result.value

            if not has_permission(membership.role, Permission.access_logs_view):
                if membership.unit_id is None:
                    return Return.err(
                        Error(
                            "INSUFFICIENT_ROLE",
                            "You do not have permission to view access logs",
                        )
                    )
                if unit_id is not None and unit_id != membership.unit_id:
                    return Return.err(
                        Error(
                            "INSUFFICIENT_ROLE",
                            "You can only view access logs of your own unit",
                        )
                    )
                unit_id = membership.unit_id

            try:
                entries, next_cursor = await self.uow.access_logs.get_by_organization_paginated(
                    organization_id,
                    limit=limit,
                    cursor=cursor,
                    unit_id=unit_id,
                    invitation_id=invitation_id,
                )
            except ValueError:
                return Return.err(
                    Error("INVALID_CURSOR", "Invalid pagination cursor", field="cursor")
                )

            return Return.ok(
                AccessLogPageResponse(
                    entries=[AccessLogResponse.from_entity(e) for e in entries],
                    next_cursor=next_cursor,
                )
            )
