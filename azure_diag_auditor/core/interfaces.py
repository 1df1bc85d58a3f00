"""Core interfaces for the Azure Diagnostic Settings Auditor"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .models import AuditSummary, DiagnosticRecord, Subscription


class IAuditSession(ABC):
    """Interface for the authenticated, subscription-scoped provider session.

    The provider API is context scoped: resources are listed and diagnostic
    settings fetched against whichever subscription was last activated with
    ``set_active_subscription``.
    """

    @abstractmethod
    def get_current_context(self) -> Optional[Any]:
        """Return the active identity/context, or None when not signed in"""
        pass

    @abstractmethod
    def list_subscriptions(self) -> List[Any]:
        """Return every subscription visible to the session"""
        pass

    @abstractmethod
    def get_subscription(self, subscription_id: str) -> Any:
        """Look up a single subscription, raising when it does not resolve"""
        pass

    @abstractmethod
    def set_active_subscription(self, subscription: Subscription) -> None:
        """Switch the session context to the given subscription"""
        pass

    @abstractmethod
    def list_resources(
        self,
        resource_group: Optional[str] = None,
        resource_type: Optional[str] = None
    ) -> List[Any]:
        """List resources of the active subscription"""
        pass

    @abstractmethod
    def list_diagnostic_settings(self, resource_id: str) -> List[Dict[str, Any]]:
        """Return the raw diagnostic settings attached to a resource"""
        pass


class IReportSink(ABC):
    """Interface for audit report writers"""

    @abstractmethod
    def write(
        self,
        records: List[DiagnosticRecord],
        summary: Optional[AuditSummary] = None
    ) -> str:
        """Serialize records and return the written path"""
        pass
