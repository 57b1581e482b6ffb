"""Record Loader: storage key, payload parsing, and the effectful load.

- ``storage_key`` builds ``<namespace>:transactions_user:<user_id>``.
- ``parse_records`` turns a serialized payload into validated records. An
  absent payload is an empty collection; a payload that is not a JSON array is
  a :class:`~finance_summary.errors.MalformedPayloadError`. Invalid elements
  either abort the load (``on_invalid="fail"``) or are skipped and counted
  (``on_invalid="skip"``).
- ``load_records`` awaits the store read (the only suspension point of a
  load cycle) and parses the result.
"""

from __future__ import annotations

import json
from datetime import UTC, tzinfo
from typing import NamedTuple

from pydantic import ValidationError

from .config import DEFAULT_NAMESPACE, InvalidRecordPolicy, SummaryConfig
from .errors import InvalidRecordError, MalformedPayloadError
from .logging_setup import get_logger
from .models import TransactionRecord, UserIdentity, as_instant
from .storage import KeyValueStore

_logger = get_logger(__name__)


class ParsedRecords(NamedTuple):
    """Records in stored order plus how many elements were skipped."""

    records: list[TransactionRecord]
    skipped: int = 0


def storage_key(user_id: str, namespace: str = DEFAULT_NAMESPACE) -> str:
    uid = str(user_id)
    if not uid.strip():
        raise ValueError("user_id must be non-empty")
    return f"{namespace}:transactions_user:{uid}"


def _validation_message(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<record>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def parse_records(
    payload: str | None,
    *,
    tz: tzinfo = UTC,
    on_invalid: InvalidRecordPolicy = "fail",
    key: str | None = None,
) -> ParsedRecords:
    """Parse a stored payload into :class:`TransactionRecord` objects.

    Timestamps without an offset are pinned to ``tz`` so every returned record
    carries an aware ``date``.
    """

    if payload is None:
        return ParsedRecords(records=[])

    try:
        raw = json.loads(payload)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedPayloadError(f"stored value is not valid JSON: {exc}", key=key) from exc
    if not isinstance(raw, list):
        raise MalformedPayloadError(
            f"stored value must be a JSON array, got {type(raw).__name__}", key=key
        )

    records: list[TransactionRecord] = []
    skipped = 0
    for index, item in enumerate(raw):
        try:
            record = TransactionRecord.model_validate(item)
        except ValidationError as exc:
            if on_invalid == "skip":
                skipped += 1
                _logger.warning("skipping invalid record %d: %s", index, _validation_message(exc))
                continue
            raise InvalidRecordError(index, _validation_message(exc), errors=exc.errors()) from exc
        if record.date.tzinfo is None:
            record = record.model_copy(update={"date": as_instant(record.date, tz)})
        records.append(record)

    if skipped:
        _logger.warning("dropped %d of %d stored records", skipped, len(raw))
    return ParsedRecords(records=records, skipped=skipped)


async def load_records(
    store: KeyValueStore,
    identity: UserIdentity | str,
    config: SummaryConfig | None = None,
) -> ParsedRecords:
    """Read and parse the transaction collection stored for ``identity``."""

    config = config or SummaryConfig()
    user_id = identity.id if isinstance(identity, UserIdentity) else identity
    key = storage_key(user_id, config.namespace)

    payload = await store.get(key)
    _logger.debug("read key=%s present=%s", key, payload is not None)

    return parse_records(payload, tz=config.tzinfo, on_invalid=config.on_invalid, key=key)


__all__ = ["ParsedRecords", "load_records", "parse_records", "storage_key"]
