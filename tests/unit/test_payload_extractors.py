"""Tests for payload extractors (strings, dates, decimals, emails, status aliases)."""

from datetime import UTC, date, datetime
from decimal import Decimal

from opsflow.application.services.payload_extractors import (
    extract_date,
    extract_decimal,
    extract_first_email,
    extract_status,
    extract_string,
    first_date,
    first_email,
    first_present,
    first_string,
)


def test_extract_string_trims_and_rejects_blank_or_non_string() -> None:
    assert extract_string("  hello ") == "hello"
    assert extract_string("   ") is None
    assert extract_string(42) is None
    assert extract_string(None) is None


def test_extract_date_accepts_iso_string_and_normalizes_to_utc() -> None:
    parsed = extract_date("2025-06-01T12:00:00+02:00")
    assert parsed == datetime(2025, 6, 1, 10, 0, tzinfo=UTC)


def test_extract_date_naive_iso_is_assumed_utc() -> None:
    assert extract_date("2025-06-01") == datetime(2025, 6, 1, tzinfo=UTC)


def test_extract_date_accepts_epoch_milliseconds_and_date() -> None:
    assert extract_date(0) == datetime(1970, 1, 1, tzinfo=UTC)
    assert extract_date(date(2024, 2, 29)) == datetime(2024, 2, 29, tzinfo=UTC)


def test_extract_date_rejects_garbage_and_booleans() -> None:
    assert extract_date("not a date") is None
    assert extract_date(True) is None
    assert extract_date(float("nan")) is None
    assert extract_date({"at": "2025-01-01"}) is None


def test_extract_decimal_handles_numbers_and_numeric_strings() -> None:
    assert extract_decimal(5000) == Decimal("5000")
    assert extract_decimal(19.99) == Decimal("19.99")
    assert extract_decimal(" 1250.50 ") == Decimal("1250.50")
    assert extract_decimal(Decimal("7.5")) == Decimal("7.5")


def test_extract_decimal_rejects_non_finite_bool_and_text() -> None:
    assert extract_decimal(float("inf")) is None
    assert extract_decimal("NaN") is None
    assert extract_decimal(False) is None
    assert extract_decimal("twelve") is None
    assert extract_decimal(None) is None


def test_extract_first_email_takes_first_non_blank_entry() -> None:
    assert extract_first_email(["", "  ", "a@example.com", "b@example.com"]) == "a@example.com"
    assert extract_first_email("c@example.com") == "c@example.com"
    assert extract_first_email([]) is None


def test_first_helpers_respect_key_order() -> None:
    payload = {
        "customerId": "",
        "clientId": "client-9",
        "emails": ["x@example.com"],
        "due": "2025-01-02",
        "amount": 0,
    }
    assert first_string(payload, "customerId", "clientId") == "client-9"
    assert first_email(payload, "email", "emails") == "x@example.com"
    assert first_date(payload, "missing", "due") == datetime(2025, 1, 2, tzinfo=UTC)
    assert first_present(payload, "missing", "amount") == 0


def test_extract_status_checks_aliases_and_uppercases() -> None:
    assert extract_status({"status": "completed"}) == "COMPLETED"
    assert extract_status({"newStatus": "closed_won"}) == "CLOSED_WON"
    assert extract_status({"stage": " qualified "}) == "QUALIFIED"
    assert extract_status({"pipelineStatus": "Closed_Won"}) == "CLOSED_WON"
    assert extract_status({"other": "x"}) is None
