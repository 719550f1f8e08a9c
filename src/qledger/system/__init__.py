"""System-wide configuration and logging."""

from qledger.system.log_system import LoggerFactory, LoggingConfig  # isort: skip
from qledger.system.config import SystemConfig, get_system_config, reload_system_config

__all__ = [
    "LoggerFactory",
    "LoggingConfig",
    "SystemConfig",
    "get_system_config",
    "reload_system_config",
]
