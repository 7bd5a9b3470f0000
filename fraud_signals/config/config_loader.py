"""
Configuration loader for the fraud signal service.
"""

import os
import yaml
from typing import Dict, Any, Optional
from pathlib import Path

from ..exceptions import ConfigurationError

DEFAULT_CONFIG_PATH = "config/service_config.yaml"


class ConfigLoader:
    """Load and manage configuration for the fraud signal service."""

    env_mappings = {
        "API_HOST": ("api", "host"),
        "API_PORT": ("api", "port"),
        "REDIS_HOST": ("redis", "host"),
        "REDIS_PORT": ("redis", "port"),
        "REDIS_DB": ("redis", "db"),
        "KAFKA_BOOTSTRAP_SERVERS": ("kafka", "bootstrap_servers"),
        "KAFKA_TOPIC_TRANSACTIONS": ("kafka", "topic_transactions"),
        "RULES_PATH": ("rules", "path"),
        "ENGINE_MAX_WORKERS": ("engine", "max_workers"),
        "LOG_LEVEL": ("logging", "level"),
    }

    def __init__(self, config_path: Optional[str] = None, load: bool = True):
        """Initialize the configuration loader."""
        self.config_path = config_path or os.getenv(
            "FRAUD_SIGNALS_CONFIG", DEFAULT_CONFIG_PATH
        )
        self.config: Dict[str, Any] = {}
        if load:
            self.load_config()

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ConfigLoader":
        """Build a loader around an in-memory configuration."""
        loader = cls(load=False)
        loader.config = dict(config)
        return loader

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        config_file = Path(self.config_path)
        if not config_file.exists():
            raise ConfigurationError(
                f"Configuration file not found: {self.config_path}"
            )

        try:
            with open(config_file, "r") as f:
                self.config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Error loading configuration: {e}", cause=e)

        if not isinstance(self.config, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self.config_path}"
            )

        # Override with environment variables
        self._override_with_env()

        return self.config

    def _override_with_env(self):
        """Override configuration with environment variables."""
        for env_var, config_path in self.env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                self._set_nested_value(self.config, config_path, env_value)

    def _set_nested_value(self, config: Dict[str, Any], path: tuple, value: Any):
        """Set a nested value in the configuration dictionary."""
        current = config
        for key in path[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        # Convert value type if needed
        if isinstance(value, str):
            if value.lower() in ("true", "false"):
                value = value.lower() == "true"
            elif value.isdigit():
                value = int(value)
            elif value.replace(".", "", 1).isdigit():
                value = float(value)

        current[path[-1]] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value using dot notation."""
        keys = key.split(".")
        value = self.config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def get_api_config(self) -> Dict[str, Any]:
        """Get HTTP API configuration."""
        return self.config.get("api") or {}

    def get_redis_config(self) -> Dict[str, Any]:
        """Get Redis configuration."""
        return self.config.get("redis") or {}

    def get_kafka_config(self) -> Dict[str, Any]:
        """Get Kafka configuration."""
        return self.config.get("kafka") or {}

    def get_processing_config(self) -> Dict[str, Any]:
        """Get processing configuration."""
        return self.config.get("processing") or {}

    def get_engine_config(self) -> Dict[str, Any]:
        """Get rule engine configuration."""
        return self.config.get("engine") or {}

    def get_simulator_config(self) -> Dict[str, Any]:
        """Get data simulator configuration."""
        return self.config.get("simulator") or {}

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.config.get("logging") or {}

    def validate_config(self) -> bool:
        """Validate the configuration."""
        required_sections = ["api", "redis", "processing"]

        for section in required_sections:
            if section not in self.config:
                raise ConfigurationError(
                    f"Missing required configuration section: {section}"
                )

        if self.get("redis.host") is None:
            raise ConfigurationError("Redis host not configured")

        port = self.get("api.port")
        if not isinstance(port, int) or not 0 < port < 65536:
            raise ConfigurationError(f"Invalid API port: {port!r}")

        workers = self.get("engine.max_workers", 1)
        if not isinstance(workers, int) or workers < 1:
            raise ConfigurationError(f"Invalid engine max_workers: {workers!r}")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Get the complete configuration as a dictionary."""
        return self.config.copy()


def load_config(config_path: Optional[str] = None) -> ConfigLoader:
    """Convenience function to load configuration."""
    return ConfigLoader(config_path)
