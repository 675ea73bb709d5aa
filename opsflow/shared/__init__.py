"""Shared utilities: enums, telemetry, and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from opsflow.shared.enums import WorkflowKey, WorkflowRunStatus
from opsflow.shared.utils import (
    ensure_utc,
    generate_cuid,
    to_json_compatible,
    utc_now,
)

__all__ = [
    "WorkflowKey",
    "WorkflowRunStatus",
    "ensure_utc",
    "generate_cuid",
    "to_json_compatible",
    "utc_now",
]
