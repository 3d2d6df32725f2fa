"""
Access Log Recorder

The only writer of the gate ledger. Appends entries and nothing else:
there is no update or delete path.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import AccessDirection, AccessLogEntry, AccessMethod

logger = logging.getLogger(__name__)


class AccessLogRecorder:
    """Append-only writer for AccessLogEntry rows"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def append(
        self,
        organization_id: UUID,
        direction: str,
        method: str,
        visitor_name: str,
        authorized_by: UUID,
        unit_id: Optional[UUID] = None,
        invitation_id: Optional[UUID] = None,
        visitor_phone: Optional[str] = None,
        vehicle_plate: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Result[AccessLogEntry]:
        """
        Append one entry and commit it.

        Must be called inside an entered unit of work. accessed_at is always
        stamped by the server and cannot be supplied.

        Returns:
            Result with the stored AccessLogEntry, or Error
            (INVALID_DIRECTION, INVALID_METHOD, VISITOR_NAME_REQUIRED,
            LOG_WRITE_FAILED)
        """
        try:
            access_direction = AccessDirection(direction)
        except ValueError:
            return Return.err(
                Error(
                    "INVALID_DIRECTION",
                    f"Invalid direction: {direction}. Must be one of: entry, exit",
                    field="direction",
                )
            )

        try:
            access_method = AccessMethod(method)
        except ValueError:
            return Return.err(
                Error("INVALID_METHOD", f"Invalid access method: {method}", field="method")
            )

        if not visitor_name or not visitor_name.strip():
            return Return.err(
                Error(
                    "VISITOR_NAME_REQUIRED",
                    "Visitor name is required",
                    field="visitor_name",
                )
            )

        entry = AccessLogEntry(
            organization_id=organization_id,
            unit_id=unit_id,
            invitation_id=invitation_id,
            visitor_name=visitor_name.strip(),
            visitor_phone=visitor_phone,
            vehicle_plate=vehicle_plate,
            access_type=access_direction,
            method=access_method,
            authorized_by=authorized_by,
            notes=notes,
        )

        try:
            entry = await self.uow.access_logs.create(entry)
            await self.uow.commit()
        except SQLAlchemyError:
            logger.exception(
                "Access log write failed (organization=%s, invitation=%s)",
                organization_id,
                invitation_id,
            )
            await self.uow.rollback()
            return Return.err(
                Error("LOG_WRITE_FAILED", "Access was not recorded in the access log")
            )

        logger.info(
            "Access logged: %s %s via %s (log=%s)",
            access_direction.value,
            entry.visitor_name,
            access_method.value,
            entry.id,
        )
        return Return.ok(entry)
