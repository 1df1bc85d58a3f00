"""Authenticated Azure session for diagnostic settings audits"""

import os
from typing import Any, Dict, List, Optional

from azure.core.exceptions import AzureError, ClientAuthenticationError
from azure.identity import (
    AzureCliCredential,
    DefaultAzureCredential,
    EnvironmentCredential,
)
from azure.mgmt.monitor import MonitorManagementClient
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.subscription import SubscriptionClient

from ..core.interfaces import IAuditSession
from ..core.models import Subscription
from ..utils.logger import setup_logger


class AzureSession(IAuditSession):
    """Azure SDK backed session.

    Management clients are created per subscription and cached; the active
    subscription decides which clients ``list_resources`` and
    ``list_diagnostic_settings`` use.
    """

    def __init__(self, credential=None):
        self.logger = setup_logger(self.__class__.__name__)
        self.credential = credential
        self._authenticated = False
        self._active_subscription: Optional[Subscription] = None
        self._client_cache: Dict[str, Dict[str, Any]] = {}

    def get_current_context(self) -> Optional[Any]:
        """Return a working credential, or None when no sign-in is usable"""

        if self._authenticated:
            return self.credential

        if self.credential is not None:
            candidates = [("provided credential", self.credential)]
        else:
            candidates = self._credential_candidates()

        for label, credential in candidates:
            try:
                self._test_credential(credential)
            except (AzureError, ClientAuthenticationError) as e:
                self.logger.debug(f"Authentication using {label} failed: {e}")
                continue
            self.credential = credential
            self._authenticated = True
            self.logger.info(f"Authenticated using {label}")
            return credential

        self.logger.error("Unable to authenticate with Azure")
        return None

    def _credential_candidates(self) -> List[Any]:
        candidates = []

        # Service principal from environment first
        if all(os.getenv(var) for var in ['AZURE_TENANT_ID', 'AZURE_CLIENT_ID', 'AZURE_CLIENT_SECRET']):
            candidates.append(("environment variables", EnvironmentCredential()))

        candidates.append(("Azure CLI", AzureCliCredential()))
        candidates.append(("default credential chain", DefaultAzureCredential()))
        return candidates

    def _test_credential(self, credential) -> None:
        """Test the credential by reading the first subscription page"""
        subscription_client = SubscriptionClient(credential)
        next(iter(subscription_client.subscriptions.list()), None)

    def _subscription_client(self) -> SubscriptionClient:
        if not self.get_current_context():
            raise ClientAuthenticationError("Unable to authenticate with Azure")
        return SubscriptionClient(self.credential)

    def list_subscriptions(self) -> List[Any]:
        subscriptions = list(self._subscription_client().subscriptions.list())
        self.logger.debug(f"Found {len(subscriptions)} visible subscriptions")
        return subscriptions

    def get_subscription(self, subscription_id: str) -> Any:
        return self._subscription_client().subscriptions.get(subscription_id)

    def set_active_subscription(self, subscription: Subscription) -> None:
        if subscription.id not in self._client_cache:
            if not self.get_current_context():
                raise ClientAuthenticationError("Unable to authenticate with Azure")
            self._client_cache[subscription.id] = {
                'resource': ResourceManagementClient(self.credential, subscription.id),
                'monitor': MonitorManagementClient(self.credential, subscription.id),
            }
            self.logger.debug(f"Created clients for subscription {subscription.id}")

        self._active_subscription = subscription

    def _active_clients(self) -> Dict[str, Any]:
        if self._active_subscription is None:
            raise RuntimeError("No active subscription; call set_active_subscription first")
        return self._client_cache[self._active_subscription.id]

    def list_resources(
        self,
        resource_group: Optional[str] = None,
        resource_type: Optional[str] = None
    ) -> List[Any]:
        resource_client = self._active_clients()['resource']
        type_filter = f"resourceType eq '{resource_type}'" if resource_type else None

        if resource_group:
            return list(resource_client.resources.list_by_resource_group(
                resource_group, filter=type_filter
            ))
        return list(resource_client.resources.list(filter=type_filter))

    def list_diagnostic_settings(self, resource_id: str) -> List[Dict[str, Any]]:
        monitor_client = self._active_clients()['monitor']
        result = monitor_client.diagnostic_settings.list(resource_id)

        # Older API versions return a collection wrapper instead of a pager
        settings = getattr(result, 'value', result) or []
        return [
            setting.as_dict() if hasattr(setting, 'as_dict') else dict(setting)
            for setting in settings
        ]
