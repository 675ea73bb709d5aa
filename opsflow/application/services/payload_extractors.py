"""Typed extraction of values from untyped event payloads.

Payload shapes differ per event source, so every helper tolerates missing or
malformed input and returns None instead of raising.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from opsflow.shared.utils.datetime import ensure_utc, from_timestamp_ms_utc

# Payload keys that may carry a lifecycle status, in lookup order.
STATUS_FIELDS: tuple[str, ...] = ("status", "newStatus", "stage", "pipelineStatus")


def extract_string(value: Any) -> str | None:
    """Return value stripped if it is a non-blank string, else None."""
    if not isinstance(value, str):
        return None
    trimmed = value.strip()
    return trimmed or None


def extract_date(value: Any) -> datetime | None:
    """Return a UTC datetime from a datetime, date, ISO-8601 string or epoch milliseconds."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return ensure_utc(datetime(value.year, value.month, value.day))
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return ensure_utc(datetime.fromisoformat(text))
        except ValueError:
            return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if not math.isfinite(value):
            return None
        try:
            return from_timestamp_ms_utc(value)
        except (OverflowError, OSError, ValueError):
            return None
    return None


def extract_decimal(value: Any) -> Decimal | None:
    """Return a finite Decimal from a Decimal, number or numeric string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(str(value)) if math.isfinite(value) else None
    text = extract_string(value)
    if text is None:
        return None
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def extract_first_email(value: Any) -> str | None:
    """Return the first non-blank string of a list, or the value itself if it is one."""
    if isinstance(value, (list, tuple)):
        for entry in value:
            candidate = extract_string(entry)
            if candidate:
                return candidate
        return None
    return extract_string(value)


def first_string(payload: Mapping[str, Any], *keys: str) -> str | None:
    """Return the first key whose value is a non-blank string."""
    for key in keys:
        candidate = extract_string(payload.get(key))
        if candidate:
            return candidate
    return None


def first_date(payload: Mapping[str, Any], *keys: str) -> datetime | None:
    """Return the first key whose value parses as a date."""
    for key in keys:
        candidate = extract_date(payload.get(key))
        if candidate:
            return candidate
    return None


def first_email(payload: Mapping[str, Any], *keys: str) -> str | None:
    """Return the first address found under keys (lists allowed)."""
    for key in keys:
        candidate = extract_first_email(payload.get(key))
        if candidate:
            return candidate
    return None


def first_present(payload: Mapping[str, Any], *keys: str) -> Any:
    """Return the first value under keys that is not None."""
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def extract_status(
    payload: Mapping[str, Any], fields: tuple[str, ...] = STATUS_FIELDS
) -> str | None:
    """Return the first status alias present in payload, uppercased."""
    status = first_string(payload, *fields)
    return status.upper() if status else None
