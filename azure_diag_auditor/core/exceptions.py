"""Error taxonomy for the diagnostic settings audit pipeline"""


class DiagnosticAuditError(Exception):
    """Base error for the audit pipeline"""


class AuthenticationMissing(DiagnosticAuditError):
    """No authenticated Azure session is available"""


class SubscriptionNotFound(DiagnosticAuditError):
    """The requested subscription could not be resolved"""


class ResourceEnumerationFailure(DiagnosticAuditError):
    """Resources of a subscription could not be listed"""

    def __init__(self, subscription_id: str, message: str):
        super().__init__(f"Subscription {subscription_id}: {message}")
        self.subscription_id = subscription_id


class DiagnosticFetchFailure(DiagnosticAuditError):
    """Diagnostic settings of a resource could not be retrieved"""

    def __init__(self, resource_id: str, message: str):
        super().__init__(f"Resource {resource_id}: {message}")
        self.resource_id = resource_id


class ExportFailure(DiagnosticAuditError):
    """The audit report could not be written"""
