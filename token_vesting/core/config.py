"""Configuration management for the vesting ledger.

Loads configuration from an optional YAML file, then lets environment
variables override individual settings.
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .exceptions import ConfigurationError

DEFAULT_CONFIG_FILE = Path("vesting.yaml")


@dataclass
class LedgerConfig:
    """Runtime configuration for the ledger and its local collaborators."""

    # Identity of the program that owns derived addresses
    program_id: str = "tokenvesting"

    # Where the state file lives
    data_dir: Path = field(default_factory=lambda: Path(".vesting"))

    # Claims up to this many seconds before start_time are zero-vested,
    # anything earlier is treated as a broken clock
    clock_skew_tolerance: int = 300

    # Decimals for mints created without an explicit value
    default_decimals: int = 9

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        self.data_dir = Path(self.data_dir)
        if not self.program_id:
            raise ConfigurationError("program_id", "must not be empty")
        if self.clock_skew_tolerance < 0:
            raise ConfigurationError("clock_skew_tolerance", "must be non-negative")
        if not 0 <= self.default_decimals <= 18:
            raise ConfigurationError("default_decimals", "must be between 0 and 18")

    @property
    def state_file(self) -> Path:
        """Path of the JSON state file."""
        return self.data_dir / "ledger.json"

    @classmethod
    def from_env(cls, base: Optional[dict[str, Any]] = None) -> "LedgerConfig":
        """Load configuration from environment variables on top of ``base``."""
        values: dict[str, Any] = dict(base or {})

        env_map = {
            "VESTING_PROGRAM_ID": "program_id",
            "VESTING_DATA_DIR": "data_dir",
            "VESTING_CLOCK_SKEW_SECONDS": "clock_skew_tolerance",
            "VESTING_DEFAULT_DECIMALS": "default_decimals",
            "VESTING_LOG_LEVEL": "log_level",
        }
        for env_var, key in env_map.items():
            value = os.getenv(env_var)
            if value is not None:
                values[key] = value

        for key in ("clock_skew_tolerance", "default_decimals"):
            if key in values:
                try:
                    values[key] = int(values[key])
                except (TypeError, ValueError):
                    raise ConfigurationError(key, f"expected an integer, got {values[key]!r}")

        return cls(**values)

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "LedgerConfig":
        """
        Load configuration from a YAML file and environment variables.

        Args:
            config_file: Optional path to a YAML file. If not provided,
                         ``vesting.yaml`` in the working directory is used
                         when it exists.

        Returns:
            LedgerConfig instance with loaded values
        """
        path = config_file or DEFAULT_CONFIG_FILE
        base: dict[str, Any] = {}

        if config_file is not None and not path.exists():
            raise ConfigurationError(str(path), "config file not found")

        if path.exists():
            with open(path, "r", encoding="utf-8") as f:
                try:
                    data = yaml.safe_load(f) or {}
                except yaml.YAMLError as e:
                    raise ConfigurationError(str(path), f"invalid YAML: {e}")
            if not isinstance(data, dict):
                raise ConfigurationError(str(path), "top level must be a mapping")

            known = {f.name for f in fields(cls)}
            unknown = set(data) - known
            if unknown:
                raise ConfigurationError(str(path), f"unknown keys: {', '.join(sorted(unknown))}")
            base.update(data)

        return cls.from_env(base)


# Global config instance (lazy loaded)
_config: Optional[LedgerConfig] = None


def get_config() -> LedgerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = LedgerConfig.load()
    return _config


def reload_config(config_file: Optional[Path] = None) -> LedgerConfig:
    """Reload configuration from file and environment."""
    global _config
    _config = LedgerConfig.load(config_file)
    return _config
