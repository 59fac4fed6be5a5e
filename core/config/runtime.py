"""
Runtime Configuration

Central configuration for hash primitive selection, proof generation
policy, logging and CLI output.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

load_dotenv()


# Environment variable prefix
ENV_PREFIX = "HASHTREE_"

DEFAULT_CONFIG_PATHS = (
    Path("hashtree.json"),
    Path(".hashtree.json"),
    Path.home() / ".config" / "hashtree" / "config.json",
)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class RuntimeConfig:
    """
    Runtime configuration for tree construction and the CLI.

    Can be loaded from:
    - Environment variables (HASHTREE_* prefix, .env supported)
    - JSON file
    - Programmatic construction

    Attributes:
        hash_algorithm: Name of the registered hash primitive
        record_self_pairs: Emit an explicit proof step for self-paired levels
        log_level: Logging level name
        log_file: Optional log file path
        output_format: CLI output format ("human" or "json")
    """
    hash_algorithm: str = "sha256"
    record_self_pairs: bool = True
    log_level: str = "INFO"
    log_file: Optional[str] = None
    output_format: str = "human"

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - HASHTREE_HASH_ALGORITHM: Hash primitive name
        - HASHTREE_RECORD_SELF_PAIRS: Record self-pair proof steps (true/false)
        - HASHTREE_LOG_LEVEL: Log level
        - HASHTREE_LOG_FILE: Log file path
        - HASHTREE_OUTPUT_FORMAT: human or json
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides["hash_algorithm"] = os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM")
        if os.getenv(f"{ENV_PREFIX}RECORD_SELF_PAIRS"):
            overrides["record_self_pairs"] = _parse_bool(
                os.getenv(f"{ENV_PREFIX}RECORD_SELF_PAIRS", "true")
            )
        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides["log_level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL", "INFO").upper()
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides["log_file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")
        if os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT"):
            overrides["output_format"] = os.getenv(f"{ENV_PREFIX}OUTPUT_FORMAT", "human").lower()

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        config = cls()
        for key in ("hash_algorithm", "record_self_pairs", "log_level", "log_file", "output_format"):
            if key in data:
                setattr(config, key, data[key])
        if isinstance(config.record_self_pairs, str):
            config.record_self_pairs = _parse_bool(config.record_self_pairs)
        return config

    @classmethod
    def from_json(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a JSON object: {path}")
        return cls.from_dict(data)

    def with_env_overrides(self) -> "RuntimeConfig":
        """Return a new config with environment variable overrides applied."""
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for key, value in overrides.items():
            setattr(new_config, key, value)
        return new_config

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def load_config(config_path: Path | None = None) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings. When no path is given,
    the default locations are searched in order.

    Args:
        config_path: Optional path to config file

    Returns:
        Merged configuration
    """
    config = RuntimeConfig()

    if config_path is not None:
        config = RuntimeConfig.from_json(config_path)
    else:
        for default_path in DEFAULT_CONFIG_PATHS:
            if default_path.exists():
                config = RuntimeConfig.from_json(default_path)
                break

    return config.with_env_overrides()


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return json.dumps(RuntimeConfig().to_dict(), indent=2) + "\n"


_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """Get the process-wide configuration, loading it from the environment on first use."""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_env()
    return _config


def set_config(config: RuntimeConfig | None) -> None:
    """Replace the process-wide configuration (None resets to lazy env loading)."""
    global _config
    _config = config
