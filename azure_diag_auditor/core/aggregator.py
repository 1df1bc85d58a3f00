"""Main orchestrator for diagnostic settings audits"""

import time
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from .enumerator import ResourceEnumerator
from .exceptions import AuthenticationMissing
from .fetcher import DiagnosticSettingFetcher
from .interfaces import IAuditSession
from .models import (
    AuditConfiguration,
    AuditResult,
    AuditSummary,
    DiagnosticRecord,
    ResourceDescriptor,
    Subscription,
)
from .normalizer import SettingNormalizer
from .resolver import SubscriptionResolver
from ..utils.logger import setup_logger

ProgressCallback = Callable[[str], None]


def compute_summary(records: List[DiagnosticRecord], subscriptions_scanned: int) -> AuditSummary:
    """Derive summary statistics from a finished record collection"""

    configured = sum(1 for record in records if record.configured)

    workspace_counts: Dict[str, int] = {}
    for record in records:
        if record.workspace_name:
            workspace_counts[record.workspace_name] = workspace_counts.get(record.workspace_name, 0) + 1

    return AuditSummary(
        subscriptions_scanned=subscriptions_scanned,
        total_records=len(records),
        configured_count=configured,
        unconfigured_count=len(records) - configured,
        workspace_destination_counts=workspace_counts,
    )


class AuditAggregator:
    """Drive the subscription/resource loop and accumulate records.

    The record list on ``self.result`` is the only accumulator and is
    appended to as work completes, so an interrupted run keeps everything
    gathered so far; ``partial_result`` summarizes it.
    """

    def __init__(
        self,
        session: IAuditSession,
        config: Optional[AuditConfiguration] = None,
        progress_callback: Optional[ProgressCallback] = None
    ):
        self.config = config or AuditConfiguration()
        self.logger = setup_logger(self.__class__.__name__)
        self.session = session
        self.progress_callback = progress_callback

        self.resolver = SubscriptionResolver(session)
        self.enumerator = ResourceEnumerator(
            session,
            resource_group=self.config.resource_group,
            resource_type=self.config.resource_type
        )
        self.fetcher = DiagnosticSettingFetcher(session)
        self.normalizer = SettingNormalizer()

        self.result = self._new_result()
        self._start_time = time.time()

    def _new_result(self) -> AuditResult:
        return AuditResult(
            audit_id=str(uuid.uuid4()),
            timestamp=datetime.now(timezone.utc),
            configuration=self.config
        )

    def run(self) -> AuditResult:
        """Run a full audit; raises on fatal errors"""

        self.result = self._new_result()
        self._start_time = time.time()
        result = self.result

        self.logger.info(f"Starting audit {result.audit_id}")

        if self.session.get_current_context() is None:
            raise AuthenticationMissing("No authenticated Azure session; sign in with 'az login' first")

        resolved = self.resolver.resolve(self.config.subscription_id)
        if resolved.is_fatal:
            raise resolved.error
        result.subscriptions = list(resolved.value)

        total = len(result.subscriptions)
        for position, subscription in enumerate(result.subscriptions, start=1):
            self._notify(f"Auditing {subscription.display_name} ({position}/{total})")
            self._audit_subscription(subscription)

        self._finish()
        result.completed = True

        self.logger.info(
            f"Audit {result.audit_id} completed: {result.summary.total_records} records, "
            f"{result.summary.configured_count} configured, "
            f"{result.summary.unconfigured_count} without diagnostic settings"
        )
        return result

    def partial_result(self) -> AuditResult:
        """Summarize whatever has been accumulated so far"""
        self._finish()
        return self.result

    def _finish(self) -> None:
        self.result.summary = compute_summary(self.result.records, len(self.result.subscriptions))
        self.result.duration_seconds = time.time() - self._start_time

    def _notify(self, message: str) -> None:
        self.logger.debug(message)
        if self.progress_callback:
            self.progress_callback(message)

    def _audit_subscription(self, subscription: Subscription) -> None:
        enumerated = self.enumerator.enumerate(subscription)
        if not enumerated.is_success:
            self.logger.warning(f"Skipping subscription {subscription.display_name}: {enumerated.reason}")
            self.result.errors.append(enumerated.reason)
            return

        resources: List[ResourceDescriptor] = enumerated.value
        if self.config.parallel_workers > 1 and len(resources) > 1:
            self._audit_resources_parallel(resources, subscription)
            return

        for resource in resources:
            records, fetch_failed = self._audit_resource(resource, subscription)
            self._accumulate(records, fetch_failed)

    def _audit_resources_parallel(
        self,
        resources: List[ResourceDescriptor],
        subscription: Subscription
    ) -> None:
        """Audit resources on a bounded pool, then merge in enumerator order"""

        completed: List[Tuple[int, List[DiagnosticRecord], bool]] = []

        executor = ThreadPoolExecutor(max_workers=self.config.parallel_workers)
        future_to_position = {
            executor.submit(self._audit_resource, resource, subscription): position
            for position, resource in enumerate(resources)
        }

        try:
            for future in as_completed(future_to_position):
                records, fetch_failed = future.result()
                completed.append((future_to_position[future], records, fetch_failed))
        except BaseException:
            for future in future_to_position:
                future.cancel()
            executor.shutdown(wait=False)
            kept = self._accumulate_prefix(completed)
            self.logger.warning(
                f"Audit of {subscription.display_name} interrupted; "
                f"kept {kept} of {len(resources)} resources"
            )
            raise

        executor.shutdown(wait=True)
        self._accumulate_prefix(completed)

    def _accumulate_prefix(self, completed: List[Tuple[int, List[DiagnosticRecord], bool]]) -> int:
        """Accumulate finished resources up to the first gap in enumerator order"""

        # Settings keep fetcher order inside each local list
        completed.sort(key=lambda item: item[0])
        kept = 0
        for position, records, fetch_failed in completed:
            if position != kept:
                break
            self._accumulate(records, fetch_failed)
            kept += 1
        return kept

    def _audit_resource(
        self,
        resource: ResourceDescriptor,
        subscription: Subscription
    ) -> Tuple[List[DiagnosticRecord], bool]:
        fetched = self.fetcher.fetch(resource.resource_id)
        settings = fetched.value or []

        if not settings:
            return [self.normalizer.unconfigured(resource, subscription)], fetched.is_skip

        records = [self.normalizer.normalize(raw, resource, subscription) for raw in settings]
        return records, fetched.is_skip

    def _accumulate(self, records: List[DiagnosticRecord], fetch_failed: bool) -> None:
        self.result.records.extend(records)
        if fetch_failed:
            self.result.fetch_failures += 1
