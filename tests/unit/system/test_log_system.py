"""Unit tests for qledger.system.log_system."""

import json
import logging
from pathlib import Path

from qledger.system.log_system import LoggerFactory, LoggingConfig


class TestLoggerFactory:
    """Tests for LoggerFactory configuration."""

    def test_get_logger_before_configure(self):
        logger = LoggerFactory.get_logger("qledger.test")

        assert hasattr(logger, "info")
        assert LoggerFactory.get_config().level == "INFO"

    def test_configure_sets_root_level(self):
        LoggerFactory.configure(LoggingConfig(level="WARNING"))

        assert LoggerFactory.is_configured() is True
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_writes_json_lines(self, tmp_path: Path):
        log_path = tmp_path / "logs" / "qledger.log"
        LoggerFactory.configure(
            LoggingConfig(level="ERROR", enable_file=True, file_path=log_path, file_level="WARNING")
        )

        LoggerFactory.get_logger().warning("order_executor.price_unavailable", instrument="NYSE:KO")
        LoggerFactory.get_logger().info("order_executor.buy_filled", instrument="NYSE:KO")

        lines = [json.loads(line) for line in log_path.read_text().splitlines()]
        assert [line["event"] for line in lines] == ["order_executor.price_unavailable"]
        assert lines[0]["instrument"] == "NYSE:KO"
        assert lines[0]["level"] == "warning"

    def test_reconfigure_replaces_handlers(self):
        LoggerFactory.configure(LoggingConfig())
        LoggerFactory.configure(LoggingConfig(format="json"))

        assert len(logging.getLogger().handlers) == 1
        assert LoggerFactory.get_config().format == "json"
