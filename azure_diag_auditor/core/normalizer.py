"""Normalize raw diagnostic settings into canonical records.

Diagnostic settings come back in different shapes depending on the API
version and the client that serialized them: camelCase REST payloads,
snake_case SDK ``as_dict()`` output, PascalCase PowerShell exports, log and
metric lists under singular or plural names, or missing altogether. Every
field is read through a fixed alias table where keys are compared
case-insensitively with underscores ignored.
"""

import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .models import DiagnosticRecord, ResourceDescriptor, Subscription

# Field precedence table
SETTING_NAME_KEYS = ('name',)
WORKSPACE_ID_KEYS = ('workspaceId',)
STORAGE_ACCOUNT_KEYS = ('storageAccountId',)
EVENT_HUB_KEYS = ('eventHubAuthorizationRuleId',)

# Plural contributes first, singular second; both are read
LOG_LIST_KEYS = ('logs', 'log')
METRIC_LIST_KEYS = ('metrics', 'metric')
CATEGORY_GROUPS_KEY = 'categoryGroups'

ENABLED_KEY = 'enabled'
CATEGORY_KEY = 'category'
CATEGORY_GROUP_KEY = 'categoryGroup'
GROUP_ENTRY_NAME_KEYS = ('categoryGroup', 'name')

GROUP_PREFIX = "Group:"
METRIC_PREFIX = "Metric:"

_WORKSPACE_PATTERN = re.compile(r'/workspaces/([^/]+)', re.IGNORECASE)


def _canonical_key(key: str) -> str:
    return key.replace('_', '').lower()


def get_field(raw: Any, *keys: str) -> Any:
    """Return the first non-None value among ``keys``.

    Looks at the map itself, then at a nested ``properties`` map as found in
    serialized ARM resources. Anything that is not a mapping yields None.
    """
    if not isinstance(raw, Mapping):
        return None

    scopes = [raw]
    for candidate_key, candidate_value in raw.items():
        if _canonical_key(str(candidate_key)) == 'properties' and isinstance(candidate_value, Mapping):
            scopes.append(candidate_value)

    for key in keys:
        wanted = _canonical_key(key)
        for scope in scopes:
            for candidate_key, candidate_value in scope.items():
                if _canonical_key(str(candidate_key)) == wanted and candidate_value is not None:
                    return candidate_value
    return None


def _as_entries(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _is_enabled(entry: Any) -> bool:
    value = get_field(entry, ENABLED_KEY)
    if isinstance(value, str):
        return value.strip().lower() == 'true'
    return value is True


def _text(value: Any) -> Optional[str]:
    """Return value as a non-empty string, else None"""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def derive_workspace_name(workspace_id: Optional[str]) -> Optional[str]:
    """Return the path segment after ``/workspaces/`` in a workspace id"""
    if not workspace_id:
        return None
    match = _WORKSPACE_PATTERN.search(workspace_id)
    return match.group(1) if match else None


def _entries_for(raw: Mapping, keys: Iterable[str]) -> List[Any]:
    entries = []
    for key in keys:
        entries.extend(_as_entries(get_field(raw, key)))
    return entries


def log_entries(raw: Mapping) -> List[str]:
    enabled = []
    for entry in _entries_for(raw, LOG_LIST_KEYS):
        if not _is_enabled(entry):
            continue
        category = _text(get_field(entry, CATEGORY_KEY))
        if category:
            enabled.append(category)
            continue
        group = _text(get_field(entry, CATEGORY_GROUP_KEY))
        if group:
            enabled.append(GROUP_PREFIX + group)
    return enabled


def metric_entries(raw: Mapping) -> List[str]:
    enabled = []
    for entry in _entries_for(raw, METRIC_LIST_KEYS):
        if _is_enabled(entry):
            enabled.append(METRIC_PREFIX + (_text(get_field(entry, CATEGORY_KEY)) or ''))
    return enabled


def category_group_entries(raw: Mapping) -> List[str]:
    enabled = []
    for entry in _as_entries(get_field(raw, CATEGORY_GROUPS_KEY)):
        if not _is_enabled(entry):
            continue
        group = _text(get_field(entry, *GROUP_ENTRY_NAME_KEYS))
        if group:
            enabled.append(GROUP_PREFIX + group)
    return enabled


class SettingNormalizer:
    """Convert raw diagnostic settings into DiagnosticRecord rows"""

    def normalize(
        self,
        raw: Dict[str, Any],
        resource: ResourceDescriptor,
        subscription: Subscription
    ) -> DiagnosticRecord:
        """Build the configured record for one raw setting"""

        workspace_id = _text(get_field(raw, *WORKSPACE_ID_KEYS))

        return DiagnosticRecord(
            subscription_name=subscription.display_name,
            subscription_id=subscription.id,
            resource_name=resource.name,
            resource_type=resource.resource_type,
            resource_group=resource.resource_group,
            location=resource.location,
            configured=True,
            setting_name=_text(get_field(raw, *SETTING_NAME_KEYS)),
            enabled_logs=log_entries(raw) + metric_entries(raw) + category_group_entries(raw),
            workspace_id=workspace_id,
            workspace_name=derive_workspace_name(workspace_id),
            storage_account_id=_text(get_field(raw, *STORAGE_ACCOUNT_KEYS)),
            event_hub_id=_text(get_field(raw, *EVENT_HUB_KEYS)),
        )

    @staticmethod
    def unconfigured(resource: ResourceDescriptor, subscription: Subscription) -> DiagnosticRecord:
        """Build the single record for a resource without diagnostic settings"""
        return DiagnosticRecord(
            subscription_name=subscription.display_name,
            subscription_id=subscription.id,
            resource_name=resource.name,
            resource_type=resource.resource_type,
            resource_group=resource.resource_group,
            location=resource.location,
            configured=False,
        )
