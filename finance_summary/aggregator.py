"""Single-pass aggregation of transaction records.

Totals are accumulated per :class:`~finance_summary.models.TransactionType`
and, independently, the latest instant seen for each type. Dates are compared
as instants, never as strings; a timestamp without an offset is read in the
caller's display timezone so mixed inputs stay comparable.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, tzinfo
from decimal import Decimal

from .models import AggregationResult, TransactionRecord, TransactionType, as_instant


def _later(current: datetime | None, candidate: datetime) -> datetime:
    if current is None or candidate > current:
        return candidate
    return current


def aggregate(records: Iterable[TransactionRecord], *, tz: tzinfo = UTC) -> AggregationResult:
    """Compute totals and latest dates over ``records`` in one pass.

    Each record contributes its ``amount`` to exactly one total. When no record
    of a type exists, its latest date is ``None``.
    """

    entries_total = Decimal(0)
    expenses_total = Decimal(0)
    entries_count = 0
    expenses_count = 0
    last_entry: datetime | None = None
    last_expense: datetime | None = None

    for record in records:
        when = as_instant(record.date, tz)
        if record.type == TransactionType.POSITIVE:
            entries_total += record.amount
            entries_count += 1
            last_entry = _later(last_entry, when)
        else:
            expenses_total += record.amount
            expenses_count += 1
            last_expense = _later(last_expense, when)

    return AggregationResult(
        entries_total=entries_total,
        expenses_total=expenses_total,
        last_entry_date=last_entry,
        last_expense_date=last_expense,
        entries_count=entries_count,
        expenses_count=expenses_count,
    )


__all__ = ["aggregate"]
