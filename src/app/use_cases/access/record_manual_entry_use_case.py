"""
Record Manual Entry Use Case

Handles a guard letting someone through without a credential and
recording it by hand.
"""

from typing import Optional
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.access_log_recorder import AccessLogRecorder
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.common import get_active_membership
from src.domain.entities import AccessMethod, Unit
from src.domain.permissions import Permission, has_permission

from .dtos import ManualEntryResponse


class RecordManualEntryUseCase:
    """
    Use case for manual gate entries.

    Business Rules:
    - Caller needs access.manual; no invitation is validated or consumed
    - unit_reference is "<unit_number>" or "<building>-<unit_number>",
      matched case-insensitively within the organization
    - A reference matching zero or several units is UNIT_NOT_FOUND
    - The entry is logged with method manual_entry and no invitation
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(
        self,
        user_id: UUID,
        organization_id: UUID,
        visitor_name: str,
        unit_reference: str,
        direction: str,
        notes: Optional[str] = None,
        visitor_phone: Optional[str] = None,
        vehicle_plate: Optional[str] = None,
    ) -> Result[ManualEntryResponse]:
        """
        Execute manual entry use case.

        Returns:
            Result with ManualEntryResponse DTO, or Error
        """
        async with self.uow:
            membership_result = await get_active_membership(
                self.uow, user_id, organization_id
            )
            if membership_result.is_err():
                return membership_result

            if not has_permission(membership_result.value.role, Permission.access_manual):
                return Return.err(
                    Error(
                        "INSUFFICIENT_ROLE",
                        "You do not have permission to record manual entries",
                    )
                )

            unit = await self._resolve_unit(organization_id, unit_reference)
            if unit is None:
                return Return.err(
                    Error("UNIT_NOT_FOUND", f"Unit {unit_reference} not found")
                )

            log_result = await AccessLogRecorder(self.uow).append(
                organization_id=organization_id,
                direction=direction,
                method=AccessMethod.manual_entry.value,
                visitor_name=visitor_name,
                authorized_by=user_id,
                unit_id=unit.id,
                visitor_phone=visitor_phone or None,
                vehicle_plate=vehicle_plate or None,
                notes=notes or None,
            )
            if log_result.is_err():
                return log_result

            entry = log_result.value
            return Return.ok(
                ManualEntryResponse(
                    log_id=str(entry.id),
                    unit_id=str(entry.unit_id),
                    accessed_at=entry.accessed_at.isoformat() + "Z",
                )
            )

    async def _resolve_unit(
        self, organization_id: UUID, unit_reference: str
    ) -> Optional[Unit]:
        reference = (unit_reference or "").strip()
        if not reference:
            return None

        candidates = []
        if "-" in reference:
            building, _, unit_number = reference.rpartition("-")
            if building.strip() and unit_number.strip():
                candidates = await self.uow.units.find_by_number(
                    organization_id, unit_number.strip(), building.strip()
                )

        # Unit numbers may themselves contain a dash
        if not candidates:
            candidates = await self.uow.units.find_by_number(organization_id, reference)

        if len(candidates) != 1:
            return None
        return candidates[0]
