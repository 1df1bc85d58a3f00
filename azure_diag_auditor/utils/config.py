"""Configuration loading and management"""

import os
from dataclasses import asdict, fields
from pathlib import Path
from typing import Dict, Any, Optional

import yaml

from ..core.models import AuditConfiguration
from ..utils.logger import setup_logger

ENV_PREFIX = "AZURE_DIAG_AUDITOR_"

DEFAULT_CONFIG_LOCATIONS = [
    "azure_diag_auditor.yml",
    "azure_diag_auditor.yaml",
    os.path.expanduser("~/.azure_diag_auditor.yml"),
    os.path.expanduser("~/.config/azure_diag_auditor/config.yml"),
]


class ConfigurationLoader:
    """Load configuration from defaults, YAML file, environment and overrides"""

    def __init__(self):
        self.logger = setup_logger(self.__class__.__name__)

    def load_configuration(
        self,
        config_file: Optional[str] = None,
        **overrides
    ) -> AuditConfiguration:
        """Build an AuditConfiguration; later sources win over earlier ones"""

        config_dict = asdict(AuditConfiguration())

        if config_file:
            file_config = self._load_from_file(config_file)
        else:
            file_config = self._load_default_config()
        if file_config:
            config_dict.update(file_config)

        config_dict.update(self._load_from_environment())

        # CLI leaves unset options as None
        config_dict.update({k: v for k, v in overrides.items() if v is not None})

        known_keys = {f.name for f in fields(AuditConfiguration)}
        unknown = sorted(set(config_dict) - known_keys)
        if unknown:
            self.logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

        config = AuditConfiguration(**{k: v for k, v in config_dict.items() if k in known_keys})
        self._validate_configuration(config)
        return config

    def _load_from_file(self, config_file: str) -> Optional[Dict[str, Any]]:
        """Load configuration from a YAML file"""

        config_path = Path(config_file)
        if not config_path.exists():
            raise ValueError(f"Configuration file not found: {config_file}")

        if config_path.suffix.lower() not in ('.yml', '.yaml'):
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ValueError(f"Configuration file {config_file} must contain a mapping")

        self.logger.info(f"Loaded configuration from: {config_file}")
        return self._flatten_config(config_data)

    def _load_default_config(self) -> Optional[Dict[str, Any]]:
        """Try the default configuration locations in order"""

        for location in DEFAULT_CONFIG_LOCATIONS:
            if os.path.exists(location):
                return self._load_from_file(location)

        return None

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration from AZURE_DIAG_AUDITOR_* variables"""

        env_config = {}

        env_mapping = {
            ENV_PREFIX + 'SUBSCRIPTION_ID': ('subscription_id', str),
            ENV_PREFIX + 'RESOURCE_GROUP': ('resource_group', str),
            ENV_PREFIX + 'RESOURCE_TYPE': ('resource_type', str),
            ENV_PREFIX + 'OUTPUT_PATH': ('output_path', str),
            ENV_PREFIX + 'PARALLEL_WORKERS': ('parallel_workers', int),
            ENV_PREFIX + 'VERBOSE': ('verbose', self._parse_bool),
        }

        for env_var, (config_key, parser) in env_mapping.items():
            value = os.getenv(env_var)
            if value is None or not value.strip():
                continue
            try:
                env_config[config_key] = parser(value.strip())
                self.logger.debug(f"Loaded {config_key} from environment: {value}")
            except ValueError as e:
                self.logger.warning(f"Failed to parse environment variable {env_var}={value}: {e}")

        return env_config

    def _flatten_config(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Flatten nested sections; a leaf key keeps its own name"""

        flattened = {}

        def _flatten(obj):
            for key, value in obj.items():
                if isinstance(value, dict):
                    _flatten(value)
                else:
                    flattened[key] = value

        _flatten(config_data)
        return flattened

    def _parse_bool(self, value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on', 'enabled')

    def _validate_configuration(self, config: AuditConfiguration) -> None:
        """Validate configuration values"""

        if not isinstance(config.parallel_workers, int) or config.parallel_workers < 1:
            raise ValueError("Parallel workers must be at least 1")

        if config.parallel_workers > 20:
            self.logger.warning("High number of parallel workers may cause API rate limiting")

        self.logger.debug("Configuration validation completed")
