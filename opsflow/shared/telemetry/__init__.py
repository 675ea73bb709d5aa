"""Shared telemetry: logging setup and tracing helpers."""

from opsflow.shared.telemetry.logging import get_logger, setup_logging
from opsflow.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    configure_tracing,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "configure_tracing",
    "traced",
    "add_span_attributes",
    "add_span_event",
]
