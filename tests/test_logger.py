import json
import logging

from starlette_statsd.utils.logger import (
    JsonFormatter,
    configure_logging,
    get_logger,
    reset_logging_for_tests,
)


def test_get_logger_returns_logger():
    """Ensure get_logger returns a logger instance with the expected name."""
    name = __name__
    logger = get_logger(name)
    assert logger.name == name


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    reset_logging_for_tests()
    try:
        get_logger(__name__)
        assert logging.getLogger().level == logging.DEBUG
    finally:
        monkeypatch.delenv("LOG_LEVEL")
        reset_logging_for_tests()
        get_logger(__name__)


def test_json_formatter_payload():
    record = logging.LogRecord(
        name="starlette_statsd.core.client",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="No statsd server on %s",
        args=("statsd:8125",),
        exc_info=None,
    )

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["name"] == "starlette_statsd.core.client"
    assert payload["message"] == "No statsd server on statsd:8125"
    assert payload["timestamp"].endswith("Z")


def test_configure_logging_uses_explicit_values():
    root = logging.getLogger()
    try:
        configure_logging("debug", "json")
        configure_logging("warning", "json")

        own = [h for h in root.handlers if isinstance(h.formatter, JsonFormatter)]
        assert len(own) == 1
        assert root.level == logging.WARNING
    finally:
        reset_logging_for_tests()
        get_logger(__name__)


def test_configure_logging_keeps_foreign_handlers(caplog):
    try:
        configure_logging("info", "console")
        assert caplog.handler in logging.getLogger().handlers

        get_logger("starlette_statsd.tests").warning("still captured")
        assert "still captured" in caplog.text
    finally:
        reset_logging_for_tests()
        get_logger(__name__)
