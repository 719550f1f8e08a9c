"""
Structured logging for qledger.

Wraps structlog on top of the stdlib logging module so that every service
gets the same processors, renderer and handlers.

Usage:
    >>> from qledger.system import LoggerFactory
    >>> logger = LoggerFactory.get_logger()
    >>> logger.info("order_executor.buy_filled", symbol="AAPL", quantity="10")
"""

import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

import structlog

_TIMESTAMP_FORMATS: dict[str, Optional[str]] = {
    "iso": "iso",
    "compact": "%Y-%m-%d %H:%M:%S",
    "time": "%H:%M:%S",
    "short": "%m-%d %H:%M",
}


@dataclass
class LoggingConfig:
    """Runtime logging configuration consumed by LoggerFactory."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json"] = "console"
    timestamp_format: Literal["iso", "compact", "time", "short"] = "compact"
    enable_file: bool = False
    file_path: Optional[Path] = None
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3


class LoggerFactory:
    """
    Central factory for structlog loggers.

    configure() may be called more than once (CLI overrides, tests); each call
    replaces the root handlers installed by the previous one.
    """

    _config: Optional[LoggingConfig] = None
    _configured: bool = False

    @classmethod
    def configure(cls, config: Optional[LoggingConfig] = None) -> None:
        """
        Configure structlog and stdlib logging.

        Args:
            config: Logging configuration (defaults used if None)
        """
        config = config or LoggingConfig()
        cls._config = config

        timestamper = structlog.processors.TimeStamper(fmt=_TIMESTAMP_FORMATS[config.timestamp_format])
        shared_processors: list[Any] = [
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            timestamper,
        ]

        renderer: Any
        if config.format == "json":
            renderer = structlog.processors.JSONRenderer()
        else:
            renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                *shared_processors,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )

        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
        )
        root.addHandler(console_handler)

        if config.enable_file and config.file_path is not None:
            file_path = Path(config.file_path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler: logging.Handler
            if config.file_rotation:
                file_handler = logging.handlers.RotatingFileHandler(
                    file_path,
                    maxBytes=config.max_file_size_mb * 1024 * 1024,
                    backupCount=config.backup_count,
                )
            else:
                file_handler = logging.FileHandler(file_path)
            file_handler.setLevel(config.file_level)
            # Files always get JSON lines
            file_handler.setFormatter(
                structlog.stdlib.ProcessorFormatter(
                    processor=structlog.processors.JSONRenderer(),
                    foreign_pre_chain=shared_processors,
                )
            )
            root.addHandler(file_handler)

        # Root must pass everything any handler wants to see
        levels = [logging.getLevelName(config.level)]
        if config.enable_file and config.file_path is not None:
            levels.append(logging.getLevelName(config.file_level))
        root.setLevel(min(levels))

        cls._configured = True

    @classmethod
    def get_logger(cls, name: Optional[str] = None) -> Any:
        """
        Get a structlog logger.

        Args:
            name: Logger name (defaults to "qledger")

        Returns:
            Bound structlog logger
        """
        return structlog.get_logger(name or "qledger")

    @classmethod
    def get_config(cls) -> LoggingConfig:
        """Return the active logging configuration (defaults if never configured)."""
        if cls._config is None:
            cls._config = LoggingConfig()
        return cls._config

    @classmethod
    def is_configured(cls) -> bool:
        return cls._configured
