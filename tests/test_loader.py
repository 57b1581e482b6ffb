import asyncio
import logging
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from finance_summary import (
    InMemoryStore,
    InvalidRecordError,
    MalformedPayloadError,
    SummaryConfig,
    TransactionType,
    UserIdentity,
    load_records,
    parse_records,
    storage_key,
)
from tests.helpers.records import payload, record


def test_storage_key_uses_namespace_and_user_id():
    assert storage_key("abc123") == "@gofinances:transactions_user:abc123"
    assert storage_key("u1", "@other") == "@other:transactions_user:u1"


def test_storage_key_rejects_empty_user_id():
    with pytest.raises(ValueError):
        storage_key("  ")


def test_storage_key_keeps_user_id_verbatim():
    assert storage_key(" u1 ") == "@gofinances:transactions_user: u1 "


def test_opaque_labels_pass_through_unstripped():
    raw = record("positive", 1, "2023-05-10", id=" a1 ", category=" food ")
    parsed = parse_records(payload(raw))
    assert parsed.records[0].id == " a1 "
    assert parsed.records[0].category == " food "


def test_blank_record_id_is_invalid():
    with pytest.raises(InvalidRecordError):
        parse_records(payload(record("positive", 1, "2023-05-10", id="   ")))


def test_missing_payload_is_empty_collection():
    parsed = parse_records(None)
    assert parsed.records == []
    assert parsed.skipped == 0


def test_records_keep_stored_order_and_fields():
    raw = payload(
        record("negative", "59.9", "2023-02-01", id="b", name="Pizza"),
        record("positive", 5000, "2023-01-01", id="a", name="Salary", category="salary"),
    )
    parsed = parse_records(raw)

    assert [r.id for r in parsed.records] == ["b", "a"]
    first = parsed.records[0]
    assert first.type is TransactionType.NEGATIVE
    assert first.amount == Decimal("59.9")
    assert first.extra == {"name": "Pizza"}
    assert parsed.records[1].category == "salary"


def test_naive_dates_are_pinned_to_the_given_timezone():
    parsed = parse_records(payload(record("positive", 1, "2023-05-10T08:30:00")))
    assert parsed.records[0].date == datetime(2023, 5, 10, 8, 30, tzinfo=UTC)


def test_offset_dates_are_kept_as_is():
    parsed = parse_records(payload(record("positive", 1, "2023-05-10T08:30:00-03:00")))
    assert parsed.records[0].date.utcoffset().total_seconds() == -3 * 3600


def test_numeric_ids_are_coerced_to_text():
    parsed = parse_records(payload(record("positive", 1, "2023-05-10", id=1700000000000)))
    assert parsed.records[0].id == "1700000000000"


@pytest.mark.parametrize("raw", ["not json", "{\"a\": 1}", "42", "[1, 2"])
def test_malformed_payload_is_fatal(raw):
    with pytest.raises(MalformedPayloadError):
        parse_records(raw, key="@gofinances:transactions_user:u1")


@pytest.mark.parametrize(
    "bad",
    [
        record("positive", -10, "2023-05-10"),
        record("refund", 10, "2023-05-10"),
        record("negative", "ten", "2023-05-10"),
        record("negative", 10, "yesterday"),
        {"type": "positive", "amount": 1, "date": "2023-05-10"},
        "just a string",
    ],
)
def test_invalid_record_fails_the_whole_load_by_default(bad):
    raw = payload(record("positive", 1, "2023-05-01"), bad)
    with pytest.raises(InvalidRecordError) as excinfo:
        parse_records(raw)
    assert excinfo.value.index == 1
    assert excinfo.value.errors


def test_skip_policy_drops_and_counts_invalid_records(caplog):
    raw = payload(
        record("positive", 1, "2023-05-01", id="ok-1"),
        record("positive", -1, "2023-05-02"),
        record("negative", 2, "not a date"),
        record("negative", 3, "2023-05-03", id="ok-2"),
    )
    with caplog.at_level(logging.WARNING, logger="finance_summary"):
        parsed = parse_records(raw, on_invalid="skip")

    assert [r.id for r in parsed.records] == ["ok-1", "ok-2"]
    assert parsed.skipped == 2
    assert "dropped 2 of 4 stored records" in caplog.text


def test_load_records_reads_the_users_key():
    store = InMemoryStore(
        {
            "@gofinances:transactions_user:u1": payload(record("positive", 10, "2023-05-10")),
            "@gofinances:transactions_user:u2": payload(record("negative", 20, "2023-05-10")),
        }
    )

    parsed = asyncio.run(load_records(store, UserIdentity(id="u2", name="Ana")))

    assert len(parsed.records) == 1
    assert parsed.records[0].type is TransactionType.NEGATIVE


def test_load_records_missing_key_is_empty():
    parsed = asyncio.run(load_records(InMemoryStore(), "nobody"))
    assert parsed.records == []


def test_load_records_honours_config_namespace_and_policy():
    store = InMemoryStore(
        {"@app:transactions_user:u1": payload(record("positive", -1, "2023-05-10"))}
    )
    config = SummaryConfig(namespace="@app", on_invalid="skip")

    parsed = asyncio.run(load_records(store, "u1", config))

    assert parsed.records == []
    assert parsed.skipped == 1
