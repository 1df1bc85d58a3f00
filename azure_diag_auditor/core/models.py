"""Core data models for Azure Diagnostic Settings Auditor"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Any, Optional


class StageStatus(Enum):
    """Outcome tag for a single pipeline stage"""
    SUCCESS = "success"
    SKIP = "skip"
    FATAL = "fatal"


@dataclass(frozen=True)
class StageResult:
    """Result of one pipeline stage.

    The driving loop inspects ``status`` to decide whether to continue,
    skip the current unit of work, or abort the run. ``error`` carries the
    classified exception for SKIP and FATAL outcomes.
    """
    status: StageStatus
    value: Any = None
    reason: Optional[str] = None
    error: Optional[Exception] = None

    @classmethod
    def success(cls, value: Any) -> "StageResult":
        return cls(StageStatus.SUCCESS, value=value)

    @classmethod
    def skip(cls, error: Exception, value: Any = None) -> "StageResult":
        return cls(StageStatus.SKIP, value=value, reason=str(error), error=error)

    @classmethod
    def fatal(cls, error: Exception) -> "StageResult":
        return cls(StageStatus.FATAL, reason=str(error), error=error)

    @property
    def is_success(self) -> bool:
        return self.status is StageStatus.SUCCESS

    @property
    def is_skip(self) -> bool:
        return self.status is StageStatus.SKIP

    @property
    def is_fatal(self) -> bool:
        return self.status is StageStatus.FATAL


@dataclass(frozen=True)
class Subscription:
    """Azure subscription targeted by an audit run"""
    id: str
    display_name: str


@dataclass(frozen=True)
class ResourceDescriptor:
    """Minimal identifying record for an auditable resource"""
    resource_id: str
    name: str
    resource_type: str
    resource_group: str
    location: str


@dataclass
class DiagnosticRecord:
    """Canonical output row, one per (resource, diagnostic setting) pair"""
    # Subscription context
    subscription_name: str
    subscription_id: str

    # Resource identification
    resource_name: str
    resource_type: str
    resource_group: str
    location: str

    # Diagnostic configuration
    configured: bool = False
    setting_name: Optional[str] = None
    enabled_logs: List[str] = field(default_factory=list)  # duplicates preserved

    # Destinations
    workspace_id: Optional[str] = None
    workspace_name: Optional[str] = None
    storage_account_id: Optional[str] = None
    event_hub_id: Optional[str] = None


@dataclass(frozen=True)
class AuditSummary:
    """Summary statistics derived from a finished record collection"""
    subscriptions_scanned: int = 0
    total_records: int = 0
    configured_count: int = 0
    unconfigured_count: int = 0
    workspace_destination_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def coverage_percentage(self) -> float:
        """Share of records with a diagnostic setting"""
        if not self.total_records:
            return 0.0
        return self.configured_count / self.total_records * 100


@dataclass
class AuditConfiguration:
    """Configuration for diagnostic settings audits"""
    subscription_id: Optional[str] = None
    resource_group: Optional[str] = None
    resource_type: Optional[str] = None
    output_path: str = "."
    parallel_workers: int = 1
    verbose: bool = False


@dataclass
class AuditResult:
    """Results from a diagnostic settings audit run"""
    audit_id: str
    timestamp: datetime
    configuration: AuditConfiguration
    subscriptions: List[Subscription] = field(default_factory=list)
    records: List[DiagnosticRecord] = field(default_factory=list)
    summary: AuditSummary = field(default_factory=AuditSummary)
    duration_seconds: float = 0.0
    errors: List[str] = field(default_factory=list)
    fetch_failures: int = 0
    completed: bool = False
