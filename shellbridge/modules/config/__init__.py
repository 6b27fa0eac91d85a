"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), reset_config()
Hidden: Config sources, validation logic, environment parsing

Can be replaced with different config systems (Consul, etcd, AWS Parameter Store).
"""

import os
from typing import Any, Dict


# Configuration Contract: Required and Optional Keys
# This defines the black box interface - what the config module guarantees to provide

REQUIRED_CONFIG_KEYS = {
    "host": "Server bind address",
    "port": "Server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "command_timeout": "Hard wall-clock limit for a shell command in seconds",
    "sandbox_root": "Default working directory for shell commands",
    "home_dir": "HOME override for spawned commands",
    "server_name": "Name advertised to tool protocol clients",
}

OPTIONAL_CONFIG_KEYS = {
    "redis_url": {
        "description": "Redis URL for revocable URL secrets (e.g., redis://localhost:6379/0)",
        "default": None,
    },
}


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables."""
        self._config = self._load_from_env()
        self._validate_required_keys()

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing
        """
        missing_keys = []
        for key in REQUIRED_CONFIG_KEYS:
            if key not in self._config or self._config[key] is None:
                missing_keys.append(key)

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables and deployment configuration."
            )

        if self._config["command_timeout"] <= 0:
            raise ValueError("COMMAND_TIMEOUT must be a positive number of seconds")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        sandbox_root = os.getenv("SANDBOX_ROOT", "/workspace")

        return {
            # Server settings
            "host": os.getenv("HOST", "0.0.0.0"),
            "port": int(os.getenv("PORT", "3000")),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "server_name": os.getenv("SERVER_NAME", "github-mcp-server"),
            # Execution settings
            "command_timeout": float(os.getenv("COMMAND_TIMEOUT", "300")),
            "sandbox_root": sandbox_root,
            "home_dir": os.getenv("SHELL_HOME", sandbox_root),
            # Optional secret store
            "redis_url": os.getenv("REDIS_URL"),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key descriptions

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> print(schema['required']['sandbox_root'])
            'Default working directory for shell commands'
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


def reset_config() -> None:
    """Drop the singleton so the next get_config() re-reads the environment."""
    global _instance
    _instance = None


__all__ = ["get_config", "reset_config", "ConfigModule"]
