"""Shared utilities: datetime, generators, serialization."""

from opsflow.shared.utils.datetime import (
    add_days,
    ensure_utc,
    from_timestamp_ms_utc,
    utc_now,
    year_month_prefix,
)
from opsflow.shared.utils.generators import generate_cuid
from opsflow.shared.utils.serialization import to_json_compatible

__all__ = [
    "add_days",
    "ensure_utc",
    "from_timestamp_ms_utc",
    "generate_cuid",
    "to_json_compatible",
    "utc_now",
    "year_month_prefix",
]
