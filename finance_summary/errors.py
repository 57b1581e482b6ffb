"""Error taxonomy for the summary engine.

A missing storage key is not an error (it loads as an empty collection), so it
has no class here. Everything below is fatal for the load cycle that raised it.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any


class FinanceSummaryError(Exception):
    """Base class for errors raised by ``finance_summary``."""


class ConfigError(FinanceSummaryError, ValueError):
    """A configuration value (locale, currency, timezone, policy) is unusable."""


class MalformedPayloadError(FinanceSummaryError, ValueError):
    """The stored value exists but is not a serialized collection of records."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class InvalidRecordError(FinanceSummaryError, ValueError):
    """A single stored record failed validation.

    ``index`` is the record's position in the stored collection and
    ``errors`` holds the validator's error details (pydantic ``errors()``).
    """

    def __init__(
        self,
        index: int,
        message: str,
        *,
        errors: Sequence[Any] = (),
    ) -> None:
        super().__init__(f"record {index}: {message}")
        self.index = index
        self.errors = tuple(errors)


__all__ = [
    "ConfigError",
    "FinanceSummaryError",
    "InvalidRecordError",
    "MalformedPayloadError",
]
