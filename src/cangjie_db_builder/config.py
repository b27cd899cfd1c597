"""
Configuration management for the database builder.

Handles loading builder settings from a YAML config file or environment
variables.
"""

import os
import yaml
from typing import Dict, Any, Optional
import logging

from .batching import DEFAULT_BATCH_SIZE

logger = logging.getLogger(__name__)

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


class Config:
    """
    Configuration manager for builder settings.

    Loads configuration from config.yaml or environment variables.
    Environment variables take precedence over config file.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config.yaml file. If None, looks in current directory.
        """
        self.config_path = config_path or os.getenv('CANGJIE_DB_CONFIG', 'config.yaml')
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded = yaml.safe_load(f)
                if not isinstance(loaded, dict):
                    logger.warning(f"Ignoring {self.config_path}: top level is not a mapping")
                    loaded = {}
                self._config = loaded
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config file: {e}")
                self._config = {}
        else:
            logger.debug("No config file found, using defaults and environment variables")
            self._config = {}

        self._load_from_env()

    def _load_from_env(self) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            'BATCH_SIZE': ('processing', 'batch_size'),
            'WRITE_WORKERS': ('processing', 'workers'),
            'SKIP_MALFORMED': ('processing', 'skip_malformed'),
            'DB_ECHO': ('database', 'echo'),
        }

        for env_var, (section, key) in env_mappings.items():
            value = os.getenv(env_var)
            if value is None:
                continue
            if key in ['batch_size', 'workers']:
                try:
                    value = int(value)
                except ValueError:
                    logger.warning(f"Ignoring non-integer {env_var}={value!r}")
                    continue
            elif key in ['skip_malformed', 'echo']:
                value = value.strip().lower() in _TRUE_VALUES
            self.set(section, key, value)

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            section: Configuration section name
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        values = self._config.get(section)
        if not isinstance(values, dict):
            return default
        return values.get(key, default)

    def set(self, section: str, key: str, value: Any) -> None:
        """Set a configuration value, creating the section if needed."""
        if not isinstance(self._config.get(section), dict):
            self._config[section] = {}
        self._config[section][key] = value

    def get_processing_config(self) -> Dict[str, Any]:
        """
        Get processing configuration.

        Returns:
            Dictionary with batch size, writer thread count and malformed line policy

        Raises:
            ValueError: If batch_size or workers is not a positive integer
        """
        processing = {
            'batch_size': self.get('processing', 'batch_size', DEFAULT_BATCH_SIZE),
            'workers': self.get('processing', 'workers', 1),
            'skip_malformed': bool(self.get('processing', 'skip_malformed', False)),
        }

        for key in ['batch_size', 'workers']:
            value = processing[key]
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"processing.{key} must be a positive integer, got {value!r}")

        return processing

    def get_database_config(self) -> Dict[str, Any]:
        """
        Get database configuration.

        Returns:
            Dictionary with database engine options
        """
        return {
            'echo': bool(self.get('database', 'echo', False)),
        }
