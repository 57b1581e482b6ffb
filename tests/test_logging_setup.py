import logging

import pytest

from finance_summary import ConfigError
from finance_summary.logging_setup import configure_logging, get_logger, resolve_level


@pytest.mark.parametrize(
    ("given", "expected"),
    [(None, logging.INFO), ("debug", logging.DEBUG), (" Warning ", logging.WARNING), ("15", 15)],
)
def test_resolve_level(given, expected):
    assert resolve_level(given) == expected


def test_resolve_level_reads_environment(monkeypatch):
    monkeypatch.setenv("FINANCE_SUMMARY_LOG_LEVEL", "error")
    assert resolve_level() == logging.ERROR
    assert resolve_level("debug") == logging.DEBUG


def test_unknown_level_is_a_config_error():
    with pytest.raises(ConfigError, match="unknown log level"):
        resolve_level("chatty")


def test_configure_logging_attaches_one_stderr_handler():
    configure_logging("warning")
    configure_logging("debug")

    root = logging.getLogger("finance_summary")
    stream_handlers = [h for h in root.handlers if not isinstance(h, logging.NullHandler)]
    assert len(stream_handlers) == 1
    assert root.level == logging.WARNING
    assert root.propagate is False


def test_get_logger_is_silent_until_configured():
    logger = get_logger("finance_summary.loader")
    assert logger.name == "finance_summary.loader"
    root = logging.getLogger("finance_summary")
    assert any(isinstance(h, logging.NullHandler) for h in root.handlers)
