from __future__ import annotations

import types

from azure_diag_auditor.core.exceptions import SubscriptionNotFound
from azure_diag_auditor.core.models import StageStatus, Subscription
from azure_diag_auditor.core.resolver import SubscriptionResolver, to_subscription

from fakes import FakeSession, make_subscription


def test_all_visible_subscriptions_in_directory_order() -> None:
    session = FakeSession(subscriptions=[
        make_subscription("sub-b", "Beta"),
        make_subscription("sub-a", "Alpha"),
        make_subscription("sub-c", "Gamma", state="Disabled"),
    ])

    result = SubscriptionResolver(session).resolve()

    assert result.status is StageStatus.SUCCESS
    assert result.value == [
        Subscription(id="sub-b", display_name="Beta"),
        Subscription(id="sub-a", display_name="Alpha"),
        Subscription(id="sub-c", display_name="Gamma"),
    ]


def test_single_subscription_by_id() -> None:
    session = FakeSession(subscriptions=[make_subscription("sub-a", "Alpha"), make_subscription("sub-b", "Beta")])

    result = SubscriptionResolver(session).resolve("sub-b")

    assert result.is_success
    assert result.value == [Subscription(id="sub-b", display_name="Beta")]


def test_unknown_subscription_id_is_fatal() -> None:
    session = FakeSession(subscriptions=[make_subscription("sub-a", "Alpha")])

    result = SubscriptionResolver(session).resolve("sub-missing")

    assert result.is_fatal
    assert isinstance(result.error, SubscriptionNotFound)
    assert "sub-missing" in result.reason


def test_no_visible_subscriptions_is_fatal() -> None:
    result = SubscriptionResolver(FakeSession()).resolve()

    assert result.is_fatal
    assert isinstance(result.error, SubscriptionNotFound)


def test_to_subscription_strips_arm_prefix_and_defaults_name() -> None:
    raw = types.SimpleNamespace(subscription_id=None, id="/subscriptions/sub-x", display_name=None)

    assert to_subscription(raw) == Subscription(id="sub-x", display_name="sub-x")
