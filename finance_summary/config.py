"""Runtime configuration for the summary engine.

Locale, currency, and display timezone are plain configuration rather than
constants baked into formatting code. The defaults reproduce the deployment the
dashboard was built for (``pt-BR`` / ``BRL``). ``SummaryConfig.from_env`` reads
``FINANCE_SUMMARY_*`` variables; the CLI loads a local ``.env`` first.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import UTC, tzinfo
from typing import Any, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from babel import Locale, UnknownLocaleError
from babel.numbers import is_currency

from .errors import ConfigError

type InvalidRecordPolicy = Literal["fail", "skip"]

DEFAULT_NAMESPACE = "@gofinances"

_ENV_PREFIX = "FINANCE_SUMMARY_"


@dataclass(frozen=True, slots=True)
class SummaryLabels:
    """User-facing strings for the highlight cards.

    Templates receive the formatted day-month label as ``{date}``. The
    ``no_transactions`` sentinel replaces a label whenever its date is absent.
    """

    no_transactions: str = "Não há transações"
    last_entry: str = "Última entrada dia {date}"
    last_expense: str = "Última saída dia {date}"
    total_interval: str = "01 a {date}"
    # CLDR pattern; quoted text is literal.
    day_month_pattern: str = "d 'de' MMMM"
    entries_title: str = "Entradas"
    expenses_title: str = "Saídas"
    total_title: str = "Total"

    def __post_init__(self) -> None:
        for name in ("last_entry", "last_expense", "total_interval"):
            if "{date}" not in getattr(self, name):
                raise ConfigError(f"SummaryLabels.{name} must contain a '{{date}}' placeholder")


@dataclass(frozen=True, slots=True)
class SummaryConfig:
    """Formatting and loading options for one engine run.

    Attributes
    ----------
    locale:
        BCP 47 / POSIX locale identifier (``"pt-BR"`` or ``"pt_BR"``).
    currency:
        ISO 4217 currency code used for every amount.
    timezone:
        IANA zone name used to display dates and to interpret timestamps that
        carry no offset. ``None`` means UTC.
    namespace:
        Prefix of the storage key (``<namespace>:transactions_user:<id>``).
    on_invalid:
        ``"fail"`` aborts the load on the first invalid record; ``"skip"``
        drops invalid records and reports how many were dropped.
    """

    locale: str = "pt-BR"
    currency: str = "BRL"
    timezone: str | None = None
    namespace: str = DEFAULT_NAMESPACE
    on_invalid: InvalidRecordPolicy = "fail"
    labels: SummaryLabels = field(default_factory=SummaryLabels)

    def __post_init__(self) -> None:
        # Resolve the derived values so bad settings fail at construction time.
        _ = (self.babel_locale, self.tzinfo)
        if not is_currency(self.currency):
            raise ConfigError(f"unknown currency code: {self.currency!r}")
        if self.on_invalid not in ("fail", "skip"):
            raise ConfigError(f"on_invalid must be 'fail' or 'skip', got {self.on_invalid!r}")
        if not self.namespace.strip():
            raise ConfigError("namespace must be non-empty")

    @property
    def babel_locale(self) -> Locale:
        try:
            return Locale.parse(self.locale.strip().replace("-", "_"))
        except (UnknownLocaleError, ValueError, TypeError) as exc:
            raise ConfigError(f"unknown locale: {self.locale!r}") from exc

    @property
    def tzinfo(self) -> tzinfo:
        if self.timezone is None:
            return UTC
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"unknown timezone: {self.timezone!r}") from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> SummaryConfig:
        """Build a config from ``FINANCE_SUMMARY_*`` variables.

        Empty variables count as unset. Keyword ``overrides`` whose value is
        not ``None`` win over the environment.
        """

        values: dict[str, Any] = {}
        for name in ("locale", "currency", "timezone", "namespace", "on_invalid"):
            raw = os.getenv(_ENV_PREFIX + name.upper())
            if raw is not None and raw.strip():
                values[name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


__all__ = [
    "DEFAULT_NAMESPACE",
    "InvalidRecordPolicy",
    "SummaryConfig",
    "SummaryLabels",
]
