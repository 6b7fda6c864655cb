"""
Configuration management for the file sorter.
Handles loading, validation, and merging of configurations from multiple sources.
"""

import os
import json
import yaml
import logging
import argparse
from pathlib import Path
from typing import Dict, Any, List, Optional

from dotenv import load_dotenv

from .error_handler import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "FILE_SORTER_"


class ConfigManager:
    """Manage configuration from defaults, files, environment variables and command line."""

    def __init__(
        self,
        config_file: Optional[Path] = None,
        cli_args: Optional[argparse.Namespace] = None,
        load_env_file: bool = True,
    ):
        """
        Initialize configuration manager.

        Args:
            config_file: Optional path to configuration file
            cli_args: Optional command line arguments
            load_env_file: Whether to read a .env file before the environment
        """
        self.config = self._load_default_config()

        # Load from config file if provided
        if config_file:
            config_file = Path(config_file)
            if not config_file.exists():
                raise ConfigurationError(f"Configuration file not found: {config_file}")
            self._load_from_file(config_file)

        # Override with environment variables
        if load_env_file:
            load_dotenv()
        self._load_from_env()

        # Override with command line arguments
        if cli_args:
            self._load_from_cli(cli_args)

        # Validate configuration
        self._validate_config()

        logger.debug("Configuration loaded successfully")

    def _load_default_config(self) -> Dict[str, Any]:
        """Load default configuration."""
        return {
            "source": {"directory": "."},
            "rules": {
                "file": "rules.json",
                "script": "sort_rules.py",
                "script_function": "sort_file",
                "script_position": "after",  # 'before' or 'after' extension rules
                "use_default_rules": True,
            },
            "scanner": {"recursive": False},
            "mover": {"max_collision_probes": 1000},
            "daemon": {"interval": 10},  # seconds
            "logging": {
                "level": "INFO",
                "file": None,
                "max_size": 10485760,  # 10MB
                "backup_count": 5,
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            },
        }

    def _load_from_file(self, config_file: Path):
        """Load configuration from file."""
        logger.info(f"Loading configuration from {config_file}")

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                if config_file.suffix == ".json":
                    file_config = json.load(f)
                elif config_file.suffix in (".yaml", ".yml"):
                    file_config = yaml.safe_load(f) or {}
                else:
                    raise ConfigurationError(
                        f"Unsupported config file format: {config_file}"
                    )
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config file: {e}")
            raise ConfigurationError(f"Cannot read {config_file}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration in {config_file} must be a mapping")

        # Deep merge with default config
        self._deep_merge(self.config, file_config)

    def _load_from_env(self):
        """Load configuration from FILE_SORTER_ environment variables."""
        for key, value in os.environ.items():
            if key.startswith(ENV_PREFIX):
                config_path = key[len(ENV_PREFIX) :].lower().split("__")
                self._set_nested_config(self.config, config_path, value)

    def _load_from_cli(self, cli_args: argparse.Namespace):
        """Load configuration from command line arguments."""
        # Map CLI arguments to configuration paths
        cli_mappings = {
            "path": ["source", "directory"],
            "rules": ["rules", "file"],
            "script": ["rules", "script"],
            "script_position": ["rules", "script_position"],
            "recursive": ["scanner", "recursive"],
            "interval": ["daemon", "interval"],
            "log_level": ["logging", "level"],
            "log_file": ["logging", "file"],
        }

        for arg_name, config_path in cli_mappings.items():
            if getattr(cli_args, arg_name, None) is not None:
                self._set_nested_config(
                    self.config, config_path, getattr(cli_args, arg_name)
                )

    def _deep_merge(self, base: Dict[str, Any], update: Dict[str, Any]):
        """Deep merge update dictionary into base dictionary."""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def _set_nested_config(
        self, config_dict: Dict[str, Any], path: List[str], value: Any
    ):
        """Set a value in a nested dictionary using a path."""
        # Convert value to appropriate type if it's a string
        if isinstance(value, str):
            if value.lower() in ("true", "false"):
                value = value.lower() == "true"
            elif value.isdigit():
                value = int(value)
            elif value.replace(".", "", 1).isdigit() and value.count(".") == 1:
                value = float(value)
            elif value.startswith("[") and value.endswith("]"):
                try:
                    value = json.loads(value)
                except ValueError:
                    pass

        current = config_dict
        for part in path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[path[-1]] = value

    def _validate_config(self):
        """Validate configuration values."""
        errors = []

        interval = self.config["daemon"]["interval"]
        if not isinstance(interval, (int, float)) or isinstance(interval, bool) or interval < 1:
            errors.append("daemon interval must be a number >= 1")

        if self.config["rules"]["script_position"] not in ("before", "after"):
            errors.append("rules script_position must be 'before' or 'after'")

        probes = self.config["mover"]["max_collision_probes"]
        if not isinstance(probes, int) or isinstance(probes, bool) or probes < 1:
            errors.append("mover max_collision_probes must be an integer >= 1")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = self.config["logging"]["level"]
        if not isinstance(level, str) or level.upper() not in valid_log_levels:
            errors.append(f"logging level must be one of {valid_log_levels}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}"
            )

    def get(self, path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            path: Configuration path (e.g., 'daemon.interval')
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        current = self.config

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def set(self, path: str, value: Any):
        """
        Set configuration value using dot notation.

        Args:
            path: Configuration path (e.g., 'daemon.interval')
            value: Value to set
        """
        parts = path.split(".")
        current = self.config

        for part in parts[:-1]:
            if part not in current:
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value
