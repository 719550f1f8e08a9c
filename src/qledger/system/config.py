"""
System configuration.

qledger.yaml says HOW orders are executed, where market data lives and how
runs are logged. Scenario files (qledger.engine.config) carry the per-run
inputs.

Files are read in this order, later ones overriding earlier keys:
    config/qledger.yaml, then ~/.qledger/qledger.yaml
or only the explicit path when one is given. ${VAR} references in string
values are replaced from the environment.

Usage:
    >>> from qledger.system import get_system_config
    >>> get_system_config().data.price_column
    'Close'
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional

import yaml

from qledger.services.portfolio.config import ExecutionConfig, parse_bool

_ENV_VAR = re.compile(r"\$\{([^}]+)\}")

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@dataclass
class DataServiceConfig:
    """Where CSV market data lives and which column holds the trade price."""

    root_path: str = "data/equities"
    price_column: str = "Close"
    dividends_file: str = "dividends_calendar.json"

    @classmethod
    def from_dict(cls, section: dict[str, Any]) -> "DataServiceConfig":
        defaults = cls()
        return cls(
            root_path=os.path.expanduser(str(section.get("root_path", defaults.root_path))),
            price_column=str(section.get("price_column", defaults.price_column)),
            dividends_file=str(section.get("dividends_file", defaults.dividends_file)),
        )


@dataclass
class LoggingConfig:
    """The `logging` section; see to_logger_config()."""

    level: LogLevel = "INFO"
    format: Literal["console", "json"] = "console"
    timestamp_format: Literal["iso", "compact", "time", "short"] = "compact"
    enable_file: bool = False
    file_path: str = "logs/qledger.log"
    file_level: LogLevel = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    @classmethod
    def from_dict(cls, section: dict[str, Any]) -> "LoggingConfig":
        defaults = cls()
        return cls(
            level=str(section.get("level", defaults.level)).upper(),  # type: ignore[arg-type]
            format=section.get("format", defaults.format),
            timestamp_format=section.get("timestamp_format", defaults.timestamp_format),
            enable_file=parse_bool(section.get("enable_file", defaults.enable_file)),
            file_path=section.get("file_path") or defaults.file_path,
            file_level=str(section.get("file_level", defaults.file_level)).upper(),  # type: ignore[arg-type]
            file_rotation=parse_bool(section.get("file_rotation", defaults.file_rotation)),
            max_file_size_mb=int(section.get("max_file_size_mb", defaults.max_file_size_mb)),
            backup_count=int(section.get("backup_count", defaults.backup_count)),
        )

    def to_logger_config(self):
        """Convert to log_system.LoggingConfig for LoggerFactory."""
        from qledger.system.log_system import LoggingConfig as LogSystemConfig

        return LogSystemConfig(
            level=self.level,
            format=self.format,
            timestamp_format=self.timestamp_format,
            enable_file=self.enable_file,
            file_path=Path(self.file_path) if self.file_path else None,
            file_level=self.file_level,
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """
    System configuration for qledger.

    Example:
        >>> config = SystemConfig.load()
        >>> config.execution.charge_fee_on_empty_batch
        True
    """

    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    data: DataServiceConfig = field(default_factory=DataServiceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "SystemConfig":
        """
        Load system configuration.

        Args:
            config_path: Explicit config file; skips the search when given

        Returns:
            SystemConfig with file values over built-in defaults

        Raises:
            ValueError: If a flag or number in the file cannot be parsed
        """
        if config_path is not None:
            paths = [Path(config_path)]
        else:
            paths = [Path("config/qledger.yaml"), Path.home() / ".qledger" / "qledger.yaml"]

        merged: dict[str, Any] = {}
        for path in paths:
            if not path.exists():
                continue
            with path.open() as f:
                merged = _deep_merge(merged, yaml.safe_load(f) or {})

        return cls._from_dict(_substitute_env_vars(merged))

    @classmethod
    def _from_dict(cls, config_dict: dict[str, Any]) -> "SystemConfig":
        return cls(
            execution=ExecutionConfig.from_dict(config_dict.get("execution") or {}),
            data=DataServiceConfig.from_dict(config_dict.get("data") or {}),
            logging=LoggingConfig.from_dict(config_dict.get("logging") or {}),
        )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base, section by section."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(config: Any) -> Any:
    """Replace ${VAR} in string values; unknown variables are left as written."""
    if isinstance(config, dict):
        return {key: _substitute_env_vars(value) for key, value in config.items()}
    if isinstance(config, str):
        return _ENV_VAR.sub(lambda match: os.environ.get(match.group(1), match.group(0)), config)
    return config


_config: Optional[SystemConfig] = None


def get_system_config() -> SystemConfig:
    """Return the cached system configuration, loading it on first use."""
    global _config
    if _config is None:
        _config = SystemConfig.load()
    return _config


def reload_system_config(config_path: Optional[Path] = None) -> SystemConfig:
    """Load the system configuration again and replace the cached copy."""
    global _config
    _config = SystemConfig.load(config_path)
    return _config
