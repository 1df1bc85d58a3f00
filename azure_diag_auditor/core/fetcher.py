"""Fetch raw diagnostic settings for a resource"""

from typing import Any, Dict

from .exceptions import DiagnosticFetchFailure
from .interfaces import IAuditSession
from .models import StageResult
from ..utils.logger import setup_logger


class DiagnosticSettingFetcher:
    """Retrieve zero or more raw diagnostic settings for one resource.

    Many resource types do not support diagnostic settings and the provider
    offers no capability check, so a failed fetch is indistinguishable from
    "no settings". Failures are logged at DEBUG and returned as a SKIP whose
    value is an empty list.
    """

    def __init__(self, session: IAuditSession):
        self.logger = setup_logger(self.__class__.__name__)
        self.session = session

    def fetch(self, resource_id: str) -> StageResult:
        try:
            raw_settings = self.session.list_diagnostic_settings(resource_id) or []
            settings = [self._as_map(raw) for raw in raw_settings]
        except Exception as e:
            failure = DiagnosticFetchFailure(resource_id, f"{e.__class__.__name__}: {e}")
            self.logger.debug(f"Diagnostic settings unavailable: {failure}")
            return StageResult.skip(failure, value=[])

        return StageResult.success(settings)

    @staticmethod
    def _as_map(raw: Any) -> Dict[str, Any]:
        if isinstance(raw, dict):
            return raw
        if hasattr(raw, 'as_dict'):
            return raw.as_dict()
        return dict(raw)
