"""
Gate Access Use Cases

Scan authorization, manual entries and the access log.
"""

from .authorize_access_use_case import AuthorizeAccessUseCase
from .dtos import (
    AccessLogPageResponse,
    AccessLogResponse,
    AuthorizationResult,
    DenialReason,
    InvitationSummary,
    ManualEntryResponse,
)
from .list_access_logs_use_case import ListAccessLogsUseCase
from .record_manual_entry_use_case import RecordManualEntryUseCase

__all__ = [
    "AuthorizeAccessUseCase",
    "RecordManualEntryUseCase",
    "ListAccessLogsUseCase",
    "AuthorizationResult",
    "DenialReason",
    "InvitationSummary",
    "ManualEntryResponse",
    "AccessLogResponse",
    "AccessLogPageResponse",
]
