"""Data models for ``finance_summary``.

Stored records are validated with pydantic (they arrive as untrusted JSON);
everything derived from them is a frozen dataclass built by the engine.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo
from decimal import Decimal
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


class TransactionType(StrEnum):
    """Direction of a transaction. The sign lives here, never in ``amount``."""

    POSITIVE = "positive"
    NEGATIVE = "negative"


class TransactionRecord(BaseModel):
    """One stored transaction.

    Fields beyond the five known ones (for example ``name``) are kept in
    ``model_extra`` and passed through to the display record untouched.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    id: str
    type: TransactionType
    amount: Decimal = Field(ge=0, allow_inf_nan=False)
    category: str | None = None
    date: datetime

    @field_validator("id")
    @classmethod
    def _id_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("id must be non-empty")
        return v

    @property
    def extra(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


def as_instant(value: datetime, tz: tzinfo = UTC) -> datetime:
    """Return ``value`` as an aware datetime, attaching ``tz`` when naive."""

    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=tz)
    return value


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """The signed-in user. Only ``id`` feeds the engine; the rest passes through."""

    id: str
    name: str | None = None
    photo: str | None = None


# ---------------------------------------------------------------------------
# Derived results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AggregationResult:
    """Totals and latest dates per transaction type.

    ``last_entry_date``/``last_expense_date`` are ``None`` when no record of
    that type exists. ``net_total`` is always derived from the two totals.
    """

    entries_total: Decimal = Decimal(0)
    expenses_total: Decimal = Decimal(0)
    last_entry_date: datetime | None = None
    last_expense_date: datetime | None = None
    entries_count: int = 0
    expenses_count: int = 0

    @property
    def net_total(self) -> Decimal:
        return self.entries_total - self.expenses_total


@dataclass(frozen=True, slots=True)
class DisplayRecord:
    """A stored record with ``amount`` and ``date`` rendered for display."""

    id: str
    type: TransactionType
    amount: str
    category: str | None
    date: str
    extra: Mapping[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "id": self.id,
            "type": self.type.value,
            "amount": self.amount,
            "category": self.category,
            "date": self.date,
        }


type HighlightKind = Literal["up", "down", "total"]


@dataclass(frozen=True, slots=True)
class Highlight:
    kind: HighlightKind
    title: str
    amount: str
    last_transaction: str

    def as_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind,
            "title": self.title,
            "amount": self.amount,
            "last_transaction": self.last_transaction,
        }


@dataclass(frozen=True, slots=True)
class HighlightSummary:
    """The three highlight cards: entries, expenses and the net total."""

    entries: Highlight
    expenses: Highlight
    total: Highlight

    def __iter__(self) -> Iterator[Highlight]:
        return iter((self.entries, self.expenses, self.total))

    def as_dict(self) -> dict[str, dict[str, str]]:
        return {
            "entries": self.entries.as_dict(),
            "expenses": self.expenses.as_dict(),
            "total": self.total.as_dict(),
        }


@dataclass(frozen=True, slots=True)
class DashboardSummary:
    """Everything the display layer needs after one load cycle."""

    highlights: HighlightSummary
    transactions: tuple[DisplayRecord, ...]
    user: UserIdentity | None = None
    skipped_records: int = 0

    def as_dict(self) -> dict[str, Any]:
        user = None
        if self.user is not None:
            user = {"id": self.user.id, "name": self.user.name, "photo": self.user.photo}
        return {
            "user": user,
            "highlights": self.highlights.as_dict(),
            "transactions": [t.as_dict() for t in self.transactions],
            "skipped_records": self.skipped_records,
        }


__all__ = [
    "AggregationResult",
    "DashboardSummary",
    "DisplayRecord",
    "Highlight",
    "HighlightKind",
    "HighlightSummary",
    "TransactionRecord",
    "TransactionType",
    "UserIdentity",
    "as_instant",
]
