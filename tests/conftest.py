"""Pytest configuration for test isolation.

Configuration comes from ``FINANCE_SUMMARY_*`` and ``DATABASE_URL``
environment variables, and the CLI loads ``.env`` from the working directory.
Each test therefore gets those variables cleared and runs inside its own
temporary directory. Logging configured by a CLI test is undone afterwards so
``caplog`` keeps seeing package records in later tests.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from finance_summary import logging_setup

_ENV_VARS = (
    "DATABASE_URL",
    "FINANCE_SUMMARY_LOCALE",
    "FINANCE_SUMMARY_CURRENCY",
    "FINANCE_SUMMARY_TIMEZONE",
    "FINANCE_SUMMARY_NAMESPACE",
    "FINANCE_SUMMARY_ON_INVALID",
    "FINANCE_SUMMARY_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "cwd"
    workdir.mkdir()
    monkeypatch.chdir(workdir)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    yield
    pkg_logger = logging.getLogger("finance_summary")
    for h in list(pkg_logger.handlers):
        pkg_logger.removeHandler(h)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)
    logging_setup._CONFIGURED = False
