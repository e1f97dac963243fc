"""Tests for the logging module and the Rich success helper."""

import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from audible_chapters.logging import (
    EVENT_CHAPTER_FETCH_FAILED,
    MODULE_LOGGER_NAME,
    configure_logging,
    event_extra,
    get_level,
    get_logger,
    silence_http_logging,
)
from audible_chapters.utils.logging import log_success


class TestConfigureLogging:
    """Test logging configuration."""

    def test_rich_console_handler(self):
        logger = configure_logging(level="info", rich_tracebacks=False)
        assert logger.name == MODULE_LOGGER_NAME
        assert logger.level == logging.INFO
        assert any(isinstance(h, RichHandler) for h in logger.handlers)

    def test_plain_console_handler(self):
        logger = configure_logging(level="debug", use_rich=False)
        assert logger.level == logging.DEBUG
        assert not any(isinstance(h, RichHandler) for h in logger.handlers)
        assert any(isinstance(h, logging.StreamHandler) for h in logger.handlers)

    def test_invalid_level_defaults_to_info(self):
        configure_logging(level="invalid", rich_tracebacks=False)  # type: ignore[arg-type]
        assert logging.getLogger(MODULE_LOGGER_NAME).level == logging.INFO

    def test_reconfigure_replaces_handlers(self):
        configure_logging(rich_tracebacks=False)
        configure_logging(rich_tracebacks=False)
        assert len(logging.getLogger(MODULE_LOGGER_NAME).handlers) == 1

    def test_file_logging(self, tmp_path: Path):
        log_file = tmp_path / "logs" / "chapters.log"
        logger = configure_logging(level="info", console_output=False, file_path=log_file, rich_tracebacks=False)

        get_logger(f"{MODULE_LOGGER_NAME}.test").info("File test message")
        for handler in logger.handlers:
            handler.flush()

        assert "File test message" in log_file.read_text()


class TestLevels:
    """Test level helpers."""

    @pytest.mark.parametrize(
        ("level", "expected"),
        [("debug", logging.DEBUG), ("WARNING", logging.WARNING), (logging.ERROR, logging.ERROR), ("bogus", logging.INFO)],
    )
    def test_get_level(self, level, expected: int):
        assert get_level(level) == expected

    def test_get_logger_default(self):
        assert get_logger().name == MODULE_LOGGER_NAME
        assert get_logger("x.y").name == "x.y"

    def test_silence_http_logging(self):
        logging.getLogger("httpx").setLevel(logging.DEBUG)
        silence_http_logging()
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING


class TestEventExtra:
    """Test structured event fields."""

    def test_event_extra(self):
        assert event_extra(EVENT_CHAPTER_FETCH_FAILED, asin="B0", status_code=404) == {
            "event": "chapter_fetch_failed",
            "asin": "B0",
            "status_code": 404,
        }

    def test_fields_land_on_record(self, caplog):
        logger = logging.getLogger(f"{MODULE_LOGGER_NAME}.test")
        with caplog.at_level(logging.INFO, logger=MODULE_LOGGER_NAME):
            logger.info("hello", extra=event_extra("custom", asin="B0"))
        assert caplog.records[-1].event == "custom"
        assert caplog.records[-1].asin == "B0"


class TestLogSuccess:
    """Test the log_success helper."""

    def test_prefixes_checkmark(self, caplog):
        logger = logging.getLogger(f"{MODULE_LOGGER_NAME}.helpers")
        with caplog.at_level(logging.INFO, logger=MODULE_LOGGER_NAME):
            log_success("Registered %s", "A2CZ", logger=logger)

        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.getMessage() == "[green]✓[/green] Registered A2CZ"

    def test_logger_name(self, caplog):
        with caplog.at_level(logging.INFO, logger=MODULE_LOGGER_NAME):
            log_success("done", logger_name=f"{MODULE_LOGGER_NAME}.named")
        assert caplog.records[-1].name == f"{MODULE_LOGGER_NAME}.named"
