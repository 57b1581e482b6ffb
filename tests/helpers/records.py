"""Record builders and string helpers shared by the tests."""

from __future__ import annotations

import json
from typing import Any


def record(
    type_: str,
    amount: Any,
    date: str,
    *,
    id: str | None = None,
    category: str = "food",
    **extra: Any,
) -> dict[str, Any]:
    """Build one stored record dict (the app's on-device JSON shape)."""

    return {
        "id": id or f"{type_}-{date}-{amount}",
        "type": type_,
        "amount": amount,
        "category": category,
        "date": date,
        **extra,
    }


def payload(*records: dict[str, Any]) -> str:
    return json.dumps(list(records))


def plain(text: str) -> str:
    """Replace CLDR no-break spaces so assertions can use regular spaces."""

    return text.replace("\xa0", " ").replace("\u202f", " ")
