from __future__ import annotations

import types

from azure_diag_auditor.core.exceptions import DiagnosticFetchFailure
from azure_diag_auditor.core.fetcher import DiagnosticSettingFetcher
from azure_diag_auditor.core.models import StageStatus

from fakes import FakeSession, forbidden

RESOURCE_ID = "/subscriptions/sub-1/resourceGroups/rg/providers/Microsoft.Network/networkInterfaces/nic-1"


def test_returns_settings_in_provider_order() -> None:
    settings = [{"name": "first"}, {"name": "second"}]
    session = FakeSession(settings={RESOURCE_ID: settings})

    result = DiagnosticSettingFetcher(session).fetch(RESOURCE_ID)

    assert result.status is StageStatus.SUCCESS
    assert [raw["name"] for raw in result.value] == ["first", "second"]


def test_no_settings_is_an_empty_success() -> None:
    result = DiagnosticSettingFetcher(FakeSession()).fetch(RESOURCE_ID)

    assert result.is_success
    assert result.value == []


def test_provider_error_is_skip_with_empty_settings() -> None:
    session = FakeSession(settings={RESOURCE_ID: forbidden("ResourceTypeNotSupported")})

    result = DiagnosticSettingFetcher(session).fetch(RESOURCE_ID)

    assert result.is_skip
    assert result.value == []
    assert isinstance(result.error, DiagnosticFetchFailure)
    assert result.error.resource_id == RESOURCE_ID


def test_sdk_models_converted_to_maps() -> None:
    model = types.SimpleNamespace(as_dict=lambda: {"name": "from-sdk", "workspace_id": None})
    session = FakeSession(settings={RESOURCE_ID: [model]})

    result = DiagnosticSettingFetcher(session).fetch(RESOURCE_ID)

    assert result.value == [{"name": "from-sdk", "workspace_id": None}]


def test_malformed_sdk_model_is_skip_with_empty_settings() -> None:
    def _broken():
        raise KeyError("properties")

    session = FakeSession(settings={RESOURCE_ID: [types.SimpleNamespace(as_dict=_broken)]})

    result = DiagnosticSettingFetcher(session).fetch(RESOURCE_ID)

    assert result.is_skip
    assert result.value == []
    assert "KeyError" in result.reason
