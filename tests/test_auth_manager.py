from __future__ import annotations

import types

from azure.core.exceptions import ClientAuthenticationError

from azure_diag_auditor.auth import manager as auth_manager
from azure_diag_auditor.auth.manager import AzureSession
from azure_diag_auditor.core.models import Subscription

SUBSCRIPTION = Subscription(id="sub-1", display_name="One")


class DummyModel:
    def __init__(self, payload):
        self._payload = payload

    def as_dict(self):
        return dict(self._payload)


def _install_clients(monkeypatch, diagnostic_result=None, fail_auth=False):
    created = {"resource": [], "monitor": []}

    def _subscription_client(credential):
        def _list():
            if fail_auth:
                raise ClientAuthenticationError(message="AADSTS700016")
            return iter([types.SimpleNamespace(subscription_id="sub-1", display_name="One")])

        return types.SimpleNamespace(subscriptions=types.SimpleNamespace(
            list=_list,
            get=lambda subscription_id: types.SimpleNamespace(subscription_id=subscription_id, display_name="One"),
        ))

    def _resource_client(credential, subscription_id):
        created["resource"].append(subscription_id)
        resources = types.SimpleNamespace(
            list=lambda filter=None: [("all", filter)],
            list_by_resource_group=lambda group, filter=None: [(group, filter)],
        )
        return types.SimpleNamespace(resources=resources)

    def _monitor_client(credential, subscription_id):
        created["monitor"].append(subscription_id)
        return types.SimpleNamespace(diagnostic_settings=types.SimpleNamespace(
            list=lambda resource_uri: diagnostic_result
        ))

    monkeypatch.setattr(auth_manager, "SubscriptionClient", _subscription_client)
    monkeypatch.setattr(auth_manager, "ResourceManagementClient", _resource_client)
    monkeypatch.setattr(auth_manager, "MonitorManagementClient", _monitor_client)
    return created


def test_failed_credential_means_no_context(monkeypatch) -> None:
    _install_clients(monkeypatch, fail_auth=True)

    assert AzureSession(credential=object()).get_current_context() is None


def test_working_credential_is_returned_as_context(monkeypatch) -> None:
    _install_clients(monkeypatch)
    credential = object()

    assert AzureSession(credential=credential).get_current_context() is credential


def test_clients_cached_per_subscription(monkeypatch) -> None:
    created = _install_clients(monkeypatch, diagnostic_result=[])
    session = AzureSession(credential=object())

    session.set_active_subscription(SUBSCRIPTION)
    session.set_active_subscription(SUBSCRIPTION)

    assert created["resource"] == ["sub-1"]
    assert created["monitor"] == ["sub-1"]


def test_list_resources_builds_type_filter(monkeypatch) -> None:
    _install_clients(monkeypatch)
    session = AzureSession(credential=object())
    session.set_active_subscription(SUBSCRIPTION)

    assert session.list_resources() == [("all", None)]
    assert session.list_resources(resource_type="Microsoft.Web/sites") == [
        ("all", "resourceType eq 'Microsoft.Web/sites'")
    ]
    assert session.list_resources(resource_group="rg-app") == [("rg-app", None)]


def test_diagnostic_settings_from_pager_and_collection(monkeypatch) -> None:
    models = [DummyModel({"name": "a"}), DummyModel({"name": "b"})]

    _install_clients(monkeypatch, diagnostic_result=iter(models))
    session = AzureSession(credential=object())
    session.set_active_subscription(SUBSCRIPTION)
    assert session.list_diagnostic_settings("/rid") == [{"name": "a"}, {"name": "b"}]

    _install_clients(monkeypatch, diagnostic_result=types.SimpleNamespace(value=models))
    session = AzureSession(credential=object())
    session.set_active_subscription(SUBSCRIPTION)
    assert session.list_diagnostic_settings("/rid") == [{"name": "a"}, {"name": "b"}]
