"""Logging setup for Azure Diagnostic Settings Auditor"""

import logging
import sys
from typing import Optional

LOGGER_NAMESPACE = "azure_diag_auditor"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEBUG_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a component logger under the package namespace.

    Handlers live on the namespace logger only; passing ``level`` reconfigures
    the whole namespace, so the CLI calls this once with the run's level.
    """
    root = logging.getLogger(LOGGER_NAMESPACE)

    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
        root.propagate = False

    if level:
        log_level = getattr(logging, level.upper(), logging.INFO)
        root.setLevel(log_level)
        for handler in root.handlers:
            handler.setFormatter(logging.Formatter(
                DEBUG_LOG_FORMAT if log_level == logging.DEBUG else LOG_FORMAT
            ))

    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")
