"""Display formatting for email variables (currency, dates, names, counts)."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from babel.dates import format_date as babel_format_date
from babel.numbers import format_currency as babel_format_currency

from opsflow.application.services.payload_extractors import extract_string

DEFAULT_LOCALE = "en_US"
DEFAULT_CURRENCY = "USD"


def format_currency(amount: Decimal | None, currency: str | None = None) -> str:
    """Format amount as en-US currency (e.g. $5,000.00); empty string when amount is None."""
    if amount is None:
        return ""
    code = (currency or DEFAULT_CURRENCY).upper()
    try:
        return babel_format_currency(amount, code, locale=DEFAULT_LOCALE)
    except (TypeError, ValueError):
        return f"{code} {amount}"


def format_date(value: datetime | date | None) -> str | None:
    """Format value as a medium en-US date (e.g. Jan 5, 2025); None passes through."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    return babel_format_date(value, format="medium", locale=DEFAULT_LOCALE)


def resolve_customer_display_name(
    first_name: str | None,
    last_name: str | None,
    company: str | None,
) -> str | None:
    """Return 'First Last', else company, else None."""
    parts = [part for part in (extract_string(first_name), extract_string(last_name)) if part]
    if parts:
        return " ".join(parts)
    return extract_string(company)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """Return e.g. '1 project' or '3 projects'."""
    label = singular if count == 1 else (plural or f"{singular}s")
    return f"{count} {label}"


def title_case_status(status: str) -> str:
    """Return DRAFT as Draft, PARTIALLY_PAID as Partially_paid."""
    return status[:1].upper() + status[1:].lower()
