"""In-memory stand-ins for the Azure session used across the test suite"""

from __future__ import annotations

import types
from typing import Any, Dict, List, Optional

from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from azure_diag_auditor.core.interfaces import IAuditSession
from azure_diag_auditor.core.models import Subscription


def make_subscription(subscription_id: str, name: str, state: str = "Enabled") -> types.SimpleNamespace:
    return types.SimpleNamespace(subscription_id=subscription_id, display_name=name, state=state)


def make_resource(
    subscription_id: str,
    resource_group: str,
    name: str,
    resource_type: str = "Microsoft.KeyVault/vaults",
    location: str = "eastus",
) -> types.SimpleNamespace:
    resource_id = f"/subscriptions/{subscription_id}/resourceGroups/{resource_group}/providers/{resource_type}/{name}"
    return types.SimpleNamespace(id=resource_id, name=name, type=resource_type, location=location)


def workspace_id(name: str, subscription_id: str = "sub-logs") -> str:
    return (
        f"/subscriptions/{subscription_id}/resourceGroups/rg-logs/providers/"
        f"Microsoft.OperationalInsights/workspaces/{name}"
    )


def forbidden(message: str = "AuthorizationFailed") -> HttpResponseError:
    return HttpResponseError(message=message)


class FakeSession(IAuditSession):
    """Session backed by dictionaries.

    ``resources`` maps subscription id to a resource list or an exception to
    raise; ``settings`` maps resource id to a settings list or an exception.
    """

    def __init__(
        self,
        subscriptions: Optional[List[Any]] = None,
        resources: Optional[Dict[str, Any]] = None,
        settings: Optional[Dict[str, Any]] = None,
        context: Any = "user@example.com",
        activation_failures: Optional[Dict[str, Exception]] = None,
    ):
        self.subscriptions = subscriptions or []
        self.resources = resources or {}
        self.settings = settings or {}
        self.context = context
        self.activation_failures = activation_failures or {}
        self.active: Optional[Subscription] = None
        self.activations: List[str] = []
        self.resource_queries: List[tuple] = []
        self.settings_queries: List[str] = []

    def get_current_context(self):
        return self.context

    def list_subscriptions(self):
        return list(self.subscriptions)

    def get_subscription(self, subscription_id):
        for subscription in self.subscriptions:
            if subscription.subscription_id == subscription_id:
                return subscription
        raise ResourceNotFoundError(message=f"Subscription '{subscription_id}' could not be found.")

    def set_active_subscription(self, subscription):
        self.activations.append(subscription.id)
        if subscription.id in self.activation_failures:
            raise self.activation_failures[subscription.id]
        self.active = subscription

    def list_resources(self, resource_group=None, resource_type=None):
        self.resource_queries.append((self.active.id, resource_group, resource_type))
        listed = self.resources.get(self.active.id, [])
        if isinstance(listed, Exception):
            raise listed
        return [
            resource for resource in listed
            if (resource_group is None or f"/resourceGroups/{resource_group}/" in resource.id)
            and (resource_type is None or resource.type == resource_type)
        ]

    def list_diagnostic_settings(self, resource_id):
        self.settings_queries.append(resource_id)
        found = self.settings.get(resource_id, [])
        if isinstance(found, Exception):
            raise found
        return list(found)
