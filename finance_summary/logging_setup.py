"""Logging for ``finance_summary``.

Engine modules log through ``get_logger(__name__)`` and stay silent until a
host opts in. The CLI opts in once, in its root callback, with
``configure_logging``; the level comes from ``--log-level`` or
``FINANCE_SUMMARY_LOG_LEVEL`` and defaults to ``INFO``. Records go to stderr
so ``show --json`` output on stdout stays parseable.
"""

from __future__ import annotations

import logging
import os
import sys

from .errors import ConfigError

LOG_LEVEL_ENV = "FINANCE_SUMMARY_LOG_LEVEL"
_ROOT = "finance_summary"
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_CONFIGURED = False


def resolve_level(level: int | str | None = None) -> int:
    """Turn ``level`` (or the environment when ``None``) into a logging level.

    Accepts ints, numeric strings and level names in any case. Unknown names
    raise :class:`ConfigError`.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    try:
        return logging.getLevelNamesMapping()[name]
    except KeyError:
        raise ConfigError(f"unknown log level: {level!r}") from None


def configure_logging(level: int | str | None = None) -> None:
    """Send package records to stderr. Later calls are no-ops."""

    global _CONFIGURED
    if _CONFIGURED:
        return
    resolved = resolve_level(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT))

    root = logging.getLogger(_ROOT)
    for existing in [h for h in root.handlers if isinstance(h, logging.NullHandler)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(resolved)
    root.propagate = False
    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not _CONFIGURED and not root.handlers:
        root.addHandler(logging.NullHandler())
    return logging.getLogger(name)
