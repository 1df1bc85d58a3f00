"""Azure Diagnostic Settings Auditor"""

__version__ = "1.0.0"
