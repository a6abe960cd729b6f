"""Configuration management for the cool-off tracker."""
import copy
import os
import yaml
from pathlib import Path
from typing import Any, Optional
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULTS = {
    'tracking': {
        'database_path': '~/.cooloff_tracker/applications.db',
        'page_size': 10,
        'cool_off_months': 6,
    },
    'migration': {
        'legacy_store_path': '~/.cooloff_tracker/local_storage.json',
        'legacy_key': 'jobApplications',
        'remove_source': False,
    },
    'logging': {
        'level': 'INFO',
        'use_systemd': False,
        'file': None,
    },
}


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Singleton configuration manager."""

    _instance: Optional['Config'] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._initialized = True
        self._load_env()
        self._load_yaml()

    def _load_env(self):
        """Load environment variables from .env file."""
        env_path = PROJECT_ROOT / ".env"
        load_dotenv(env_path)

    @property
    def config_path(self) -> Path:
        """Path of the YAML file, overridable with COOLOFF_TRACKER_CONFIG."""
        override = os.getenv('COOLOFF_TRACKER_CONFIG')
        if override:
            return Path(override).expanduser()
        return PROJECT_ROOT / "config" / "config.yaml"

    def _load_yaml(self):
        """Load configuration from YAML file, layered over the defaults.

        A missing file is not an error: the tracker runs on defaults.
        """
        config_path = self.config_path

        loaded = {}
        if config_path.exists():
            with open(config_path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file must contain a mapping: {config_path}")

        self.config = _merge(DEFAULTS, loaded)

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path (e.g., 'tracking.page_size')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Example:
            >>> config = Config()
            >>> config.get('migration.legacy_key')
            'jobApplications'
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_env(self, key: str, default: Any = None) -> Any:
        """
        Get environment variable.

        Args:
            key: Environment variable name
            default: Default value if not found

        Returns:
            Environment variable value or default
        """
        return os.getenv(key, default)

    def get_database_path(self) -> str:
        """
        Get the record store location.

        COOLOFF_TRACKER_DB wins over the config file so tests and one-off
        runs can point at a scratch database.

        Returns:
            Path string, or ':memory:' for an in-memory store
        """
        path = self.get_env('COOLOFF_TRACKER_DB') or self.get('tracking.database_path')
        if path == ':memory:':
            return path
        return str(Path(path).expanduser())

    def get_legacy_store_path(self) -> Path:
        """Get the legacy flat store file."""
        return Path(self.get('migration.legacy_store_path')).expanduser()

    @property
    def page_size(self) -> int:
        """Number of applications shown per page."""
        return int(self.get('tracking.page_size', 10))

    @property
    def cool_off_months(self) -> int:
        """Length of the cool-off period in calendar months."""
        return int(self.get('tracking.cool_off_months', 6))

    def reload(self):
        """Reload configuration from files."""
        self._load_env()
        self._load_yaml()


# Global config instance
config = Config()
