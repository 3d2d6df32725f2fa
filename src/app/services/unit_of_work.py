from abc import ABC, abstractmethod

from src.app.repositories.access_log_repository import IAccessLogRepository
from src.app.repositories.audit_event_repository import IAuditEventRepository
from src.app.repositories.invitation_repository import IInvitationRepository
from src.app.repositories.membership_repository import IMembershipRepository
from src.app.repositories.unit_repository import IUnitRepository


class UnitOfWork(ABC):
    """Abstract UnitOfWork - defines repository access and transaction management"""

    # Repository properties (initialized in __aenter__)
    units: IUnitRepository
    memberships: IMembershipRepository
    invitations: IInvitationRepository
    access_logs: IAccessLogRepository
    audit_events: IAuditEventRepository

    @abstractmethod
    async def __aenter__(self):
        pass

    @abstractmethod
    async def __aexit__(self, *args):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass
