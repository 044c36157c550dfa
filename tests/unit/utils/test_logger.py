"""Tests for logging helpers."""

import logging

import pytest
import structlog

from cosmic_core.utils.logger import configure_logging, get_logger, truncate


class TestTruncate:
    def test_short_value_unchanged(self):
        assert truncate("abc", 10) == "abc"

    def test_long_value_cut_with_marker(self):
        assert truncate("a" * 15, 10) == "a" * 10 + "... [5 more chars]"

    def test_none_becomes_empty(self):
        assert truncate(None) == ""  # type: ignore[arg-type]


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    logging.basicConfig(force=True)


class TestConfigureLogging:
    def test_json_renderer_by_default(self):
        configure_logging("INFO", debug=False)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_in_debug(self):
        configure_logging("DEBUG", debug=True)
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_logger_accepts_keyword_context(self, capsys):
        configure_logging("INFO", debug=False)
        get_logger("cosmic_core.test").info("report saved", id="kundali_abc")
        assert "kundali_abc" in capsys.readouterr().out
