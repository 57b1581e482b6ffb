"""Locale-aware rendering of aggregation results.

Formatting is delegated to Babel (CLDR data), so separators, currency symbol
placement and month names follow the configured locale:

- amounts: ``format_amount`` -> ``"R$ 1.000,00"`` for ``pt-BR``/``BRL``
  (CLDR places a no-break space after the symbol).
- list dates: ``format_list_date`` -> two-digit day, month and year in the
  locale's short-date order (``"10/05/23"`` for ``pt-BR``).
- highlight dates: ``format_day_month`` -> long form from
  ``SummaryLabels.day_month_pattern`` (``"15 de maio"``).

An absent date always renders as ``SummaryLabels.no_transactions``. The
``total`` card's interval label is derived from the latest *expense* only.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import date, datetime
from decimal import Decimal
from functools import lru_cache

from babel.dates import format_date, get_date_format
from babel.numbers import format_currency

from .config import SummaryConfig
from .models import (
    AggregationResult,
    DisplayRecord,
    Highlight,
    HighlightSummary,
    TransactionRecord,
    as_instant,
)

# Quoted literals in CLDR patterns must survive field rewriting untouched.
_QUOTED_RE = re.compile(r"('[^']*')")
_FIELD_WIDTHS = ((re.compile(r"d+"), "dd"), (re.compile(r"M+|L+"), "MM"), (re.compile(r"y+"), "yy"))


@lru_cache(maxsize=32)
def _short_date_pattern(locale_id: str) -> str:
    """Return the locale's short date pattern with every field two digits wide."""

    pattern = get_date_format("short", locale=locale_id).pattern
    parts = _QUOTED_RE.split(pattern)
    for i, part in enumerate(parts):
        if part.startswith("'"):
            continue
        for field_re, replacement in _FIELD_WIDTHS:
            part = field_re.sub(replacement, part)
        parts[i] = part
    return "".join(parts)


def _local_date(value: datetime, config: SummaryConfig) -> date:
    tz = config.tzinfo
    return as_instant(value, tz).astimezone(tz).date()


def format_amount(value: Decimal | int | float, config: SummaryConfig) -> str:
    return format_currency(value, config.currency, locale=config.babel_locale)


def format_list_date(value: datetime, config: SummaryConfig) -> str:
    locale = config.babel_locale
    return format_date(_local_date(value, config), _short_date_pattern(str(locale)), locale=locale)


def format_day_month(value: datetime, config: SummaryConfig) -> str:
    return format_date(
        _local_date(value, config),
        config.labels.day_month_pattern,
        locale=config.babel_locale,
    )


def _activity_label(value: datetime | None, template: str, config: SummaryConfig) -> str:
    if value is None:
        return config.labels.no_transactions
    return template.format(date=format_day_month(value, config))


def present_record(record: TransactionRecord, config: SummaryConfig) -> DisplayRecord:
    return DisplayRecord(
        id=record.id,
        type=record.type,
        amount=format_amount(record.amount, config),
        category=record.category,
        date=format_list_date(record.date, config),
        extra=record.extra,
    )


def present_records(
    records: Iterable[TransactionRecord], config: SummaryConfig
) -> tuple[DisplayRecord, ...]:
    """Format every record, keeping the stored order."""

    return tuple(present_record(r, config) for r in records)


def present_highlights(result: AggregationResult, config: SummaryConfig) -> HighlightSummary:
    """Build the entries/expenses/total cards from an aggregation result.

    The total card's label is the interval ending at the latest expense; it
    ignores entries entirely and falls back to the same sentinel as the other
    cards when there are no expenses.
    """

    labels = config.labels
    return HighlightSummary(
        entries=Highlight(
            kind="up",
            title=labels.entries_title,
            amount=format_amount(result.entries_total, config),
            last_transaction=_activity_label(result.last_entry_date, labels.last_entry, config),
        ),
        expenses=Highlight(
            kind="down",
            title=labels.expenses_title,
            amount=format_amount(result.expenses_total, config),
            last_transaction=_activity_label(
                result.last_expense_date, labels.last_expense, config
            ),
        ),
        total=Highlight(
            kind="total",
            title=labels.total_title,
            amount=format_amount(result.net_total, config),
            last_transaction=_activity_label(
                result.last_expense_date, labels.total_interval, config
            ),
        ),
    )


__all__ = [
    "format_amount",
    "format_day_month",
    "format_list_date",
    "present_highlights",
    "present_record",
    "present_records",
]
