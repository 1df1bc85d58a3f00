"""CSV report writer for diagnostic settings audits"""

import csv
import re
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..core.exceptions import ExportFailure
from ..core.interfaces import IReportSink
from ..core.models import AuditConfiguration, AuditSummary, DiagnosticRecord
from ..utils.logger import setup_logger

CSV_COLUMNS = [
    'SubscriptionName',
    'SubscriptionId',
    'ResourceName',
    'ResourceType',
    'ResourceGroup',
    'Location',
    'DiagnosticsConfigured',
    'SettingName',
    'EnabledLogs',
    'WorkspaceName',
    'WorkspaceId',
    'StorageAccountId',
    'EventHubId',
]

ENABLED_LOGS_SEPARATOR = "; "
EMPTY_LOGS_MARKER = "None"
ALL_SUBSCRIPTIONS_SCOPE = "AllSubscriptions"


def report_scope(config: AuditConfiguration) -> str:
    """Scope label used in the report file name"""
    parts = [config.subscription_id or ALL_SUBSCRIPTIONS_SCOPE]
    if config.resource_group:
        parts.append(config.resource_group)
    return re.sub(r'[^A-Za-z0-9._-]', '-', "_".join(parts))


def report_filename(config: AuditConfiguration, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    return f"AzureDiagAudit_{report_scope(config)}_{now.strftime('%Y%m%d-%H%M')}.csv"


def record_to_row(record: DiagnosticRecord) -> List[str]:
    return [
        record.subscription_name,
        record.subscription_id,
        record.resource_name,
        record.resource_type,
        record.resource_group,
        record.location,
        str(record.configured),
        record.setting_name or '',
        ENABLED_LOGS_SEPARATOR.join(record.enabled_logs) if record.enabled_logs else EMPTY_LOGS_MARKER,
        record.workspace_name or '',
        record.workspace_id or '',
        record.storage_account_id or '',
        record.event_hub_id or '',
    ]


class CsvReportSink(IReportSink):
    """Write one CSV file per audit run"""

    def __init__(self, config: AuditConfiguration, now: Optional[datetime] = None):
        self.logger = setup_logger(self.__class__.__name__)
        self.output_path = Path(config.output_path or ".")
        self.filename = report_filename(config, now)

    @property
    def destination(self) -> Path:
        return self.output_path / self.filename

    def write(
        self,
        records: List[DiagnosticRecord],
        summary: Optional[AuditSummary] = None
    ) -> str:
        destination = self.destination

        try:
            self.output_path.mkdir(parents=True, exist_ok=True)
            with open(destination, 'w', newline='', encoding='utf-8') as f:
                writer = csv.writer(f)
                writer.writerow(CSV_COLUMNS)
                for record in records:
                    writer.writerow(record_to_row(record))
        except OSError as e:
            raise ExportFailure(f"Failed to write report to {destination}: {e}") from e

        self.logger.info(f"CSV output written to {destination} ({len(records)} records)")
        return str(destination)
