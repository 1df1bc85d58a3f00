"""List the auditable resources of a subscription"""

from typing import Any, Optional

from .exceptions import ResourceEnumerationFailure
from .interfaces import IAuditSession
from .models import ResourceDescriptor, StageResult, Subscription
from ..utils.logger import setup_logger


def resource_group_from_id(resource_id: str) -> str:
    """Return the resourceGroups segment of an ARM id, or an empty string"""
    parts = resource_id.split('/')
    for index, part in enumerate(parts[:-1]):
        if part.lower() == 'resourcegroups':
            return parts[index + 1]
    return ''


def to_descriptor(raw: Any) -> ResourceDescriptor:
    resource_id = getattr(raw, 'id', None) or ''
    return ResourceDescriptor(
        resource_id=resource_id,
        name=getattr(raw, 'name', None) or '',
        resource_type=getattr(raw, 'type', None) or '',
        resource_group=resource_group_from_id(resource_id),
        location=getattr(raw, 'location', None) or '',
    )


class ResourceEnumerator:
    """Enumerate resources in a subscription, optionally filtered"""

    def __init__(
        self,
        session: IAuditSession,
        resource_group: Optional[str] = None,
        resource_type: Optional[str] = None
    ):
        self.logger = setup_logger(self.__class__.__name__)
        self.session = session
        self.resource_group = resource_group
        self.resource_type = resource_type

    def enumerate(self, subscription: Subscription) -> StageResult:
        """Activate the subscription and list its resources.

        Any provider failure is reported as a SKIP carrying a
        ResourceEnumerationFailure so the caller moves on to the next
        subscription.
        """
        try:
            self.session.set_active_subscription(subscription)
        except Exception as e:
            return StageResult.skip(ResourceEnumerationFailure(
                subscription.id, f"could not set active subscription: {e}"
            ))

        try:
            raw_resources = self.session.list_resources(
                resource_group=self.resource_group,
                resource_type=self.resource_type
            )
            resources = [to_descriptor(raw) for raw in raw_resources]
        except Exception as e:
            return StageResult.skip(ResourceEnumerationFailure(
                subscription.id, f"could not list resources: {e}"
            ))

        self.logger.info(f"Found {len(resources)} resources in {subscription.display_name}")
        return StageResult.success(resources)
