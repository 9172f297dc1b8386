"""Tests for logging setup."""

import json
import logging

import pytest

from uptime_monitor.utils.logger import get_logger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestSetupLogging:
    """JSON and text output."""

    def test_json_file_output(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "logs" / "uptime.log"
        setup_logging(level="INFO", log_format="json", log_file=str(log_file), console=False)

        get_logger("uptime_monitor.test").info(
            "Tick completed", extra={"websites": 3, "recorded": 3}
        )
        for handler in logging.getLogger().handlers:
            handler.flush()

        record = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert record["message"] == "Tick completed"
        assert record["websites"] == 3
        assert record["levelname"] == "INFO"

    def test_text_output_respects_level(self, tmp_path, restore_root_logger):
        log_file = tmp_path / "uptime.log"
        setup_logging(level="WARNING", log_format="text", log_file=str(log_file), console=False)

        logger = get_logger("uptime_monitor.test")
        logger.info("hidden")
        logger.warning("Website probe failed")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text()
        assert "hidden" not in content
        assert "WARNING - Website probe failed" in content

    def test_apscheduler_is_quieted(self, restore_root_logger):
        setup_logging(level="DEBUG", console=False)

        assert logging.getLogger("apscheduler").level == logging.WARNING
