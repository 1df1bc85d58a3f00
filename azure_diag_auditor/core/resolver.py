"""Resolve the subscriptions targeted by an audit run"""

from typing import Any, Optional

from azure.core.exceptions import AzureError

from .exceptions import SubscriptionNotFound
from .interfaces import IAuditSession
from .models import StageResult, Subscription
from ..utils.logger import setup_logger


def to_subscription(raw: Any) -> Subscription:
    """Build a Subscription from an SDK subscription object"""
    subscription_id = getattr(raw, 'subscription_id', None) or getattr(raw, 'id', '')
    # SDK ids come back as "/subscriptions/<guid>"
    subscription_id = subscription_id.rsplit('/', 1)[-1]
    display_name = getattr(raw, 'display_name', None) or subscription_id
    return Subscription(id=subscription_id, display_name=display_name)


class SubscriptionResolver:
    """Turn an optional subscription id into an ordered target list"""

    def __init__(self, session: IAuditSession):
        self.logger = setup_logger(self.__class__.__name__)
        self.session = session

    def resolve(self, subscription_id: Optional[str] = None) -> StageResult:
        if subscription_id:
            return self._resolve_single(subscription_id)
        return self._resolve_all()

    def _resolve_single(self, subscription_id: str) -> StageResult:
        try:
            raw = self.session.get_subscription(subscription_id)
        except (AzureError, LookupError) as e:
            return StageResult.fatal(
                SubscriptionNotFound(f"Subscription {subscription_id} could not be resolved: {e}")
            )

        if raw is None:
            return StageResult.fatal(
                SubscriptionNotFound(f"Subscription {subscription_id} could not be resolved")
            )

        subscription = to_subscription(raw)
        self.logger.info(f"Targeting subscription: {subscription.display_name} ({subscription.id})")
        return StageResult.success([subscription])

    def _resolve_all(self) -> StageResult:
        try:
            subscriptions = [to_subscription(raw) for raw in self.session.list_subscriptions()]
        except AzureError as e:
            return StageResult.fatal(SubscriptionNotFound(f"Unable to list subscriptions: {e}"))

        if not subscriptions:
            return StageResult.fatal(
                SubscriptionNotFound("No subscriptions are visible to the current session")
            )

        for subscription in subscriptions:
            self.logger.debug(f"Found subscription: {subscription.display_name} ({subscription.id})")
        self.logger.info(f"Targeting {len(subscriptions)} subscriptions")
        return StageResult.success(subscriptions)
