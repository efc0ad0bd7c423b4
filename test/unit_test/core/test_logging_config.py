"""Unit tests for logging configuration module.

Tests verify that setup_logging installs the console handler with the
requested level and format, applies the per-module levels and only writes a
log file when file logging is enabled.
"""

import logging
from unittest.mock import patch

import pytest

from lyriq.core import logging_config
from lyriq.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


def _console_handler():
    return next(
        (h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler),
        None,
    )


class TestSetupLoggingLevels:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_handler_level(self, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False)

        handler = _console_handler()
        assert handler is not None
        assert handler.level == expected_level

    def test_root_logger_passes_everything_to_handlers(self):
        setup_logging(log_level="ERROR", enable_file=False)
        assert logging.getLogger().level == logging.DEBUG

    def test_replaces_existing_handlers(self):
        setup_logging(enable_file=False)
        setup_logging(enable_file=False)

        stream_handlers = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert len(stream_handlers) == 1


class TestSetupLoggingFormats:
    @pytest.mark.parametrize(
        "log_format,expected_format",
        [
            ("simple", SIMPLE_FORMAT),
            ("detailed", DETAILED_FORMAT),
            ("json", JSON_FORMAT),
            ("unknown", DETAILED_FORMAT),
        ],
    )
    def test_formatter(self, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False)
        assert _console_handler().formatter._fmt == expected_format


class TestModuleLevels:
    def test_module_levels_applied(self):
        setup_logging(enable_file=False)

        for module_name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(module_name).level == getattr(logging, level)

    def test_chatty_clients_are_quiet(self):
        assert MODULE_LOG_LEVELS["httpx"] == "WARNING"
        assert MODULE_LOG_LEVELS["twilio"] == "WARNING"
        assert MODULE_LOG_LEVELS["openai"] == "WARNING"


class TestFileLogging:
    def test_file_handler_when_enabled(self, tmp_path):
        with (
            patch.object(logging_config, "ENABLE_FILE_LOGGING", True),
            patch.object(logging_config, "LOG_FILE_DIR", str(tmp_path)),
        ):
            setup_logging(enable_file=True)

        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        try:
            assert len(file_handlers) == 1
            assert file_handlers[0].baseFilename == str(tmp_path / "lyriq.log")
        finally:
            for handler in file_handlers:
                handler.close()
            setup_logging(enable_file=False)

    def test_no_file_handler_when_disabled(self):
        with patch.object(logging_config, "ENABLE_FILE_LOGGING", False):
            setup_logging(enable_file=True)

        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)


class TestGetLogger:
    def test_returns_named_logger(self):
        logger = get_logger("lyriq.server.services.calls")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "lyriq.server.services.calls"
        assert get_logger("lyriq.server.services.calls") is logger
