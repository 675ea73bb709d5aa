"""Tracing helpers: span decorator, span events and tracer provider setup."""

import asyncio
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import NoOpTracerProvider, Status, StatusCode

from opsflow.core.config import Settings
from opsflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_TRACER_NAME = "opsflow"

# Only these kwarg names are recorded as span attributes (case-insensitive);
# payload values and recipient addresses never reach the exporter.
_SAFE_SPAN_ATTR_KEYS = frozenset({
    "id", "organization_id", "workflow_key", "module", "entity_type",
    "event_type", "user_id", "run_id", "status", "limit", "enabled",
})


def configure_tracing(settings: Settings) -> None:
    """Install a no-op tracer provider when telemetry is disabled.

    With telemetry enabled the process keeps whatever provider the host
    installed (the API default is non-recording until an SDK is configured).
    """
    if settings.telemetry_enabled:
        return
    trace.set_tracer_provider(NoOpTracerProvider())
    logger.info("Tracing disabled for %s %s", settings.app_name, settings.app_version)


@contextmanager
def _span(
    name: str,
    attributes: dict[str, str | int | float | bool] | None,
    kwargs: dict[str, Any],
) -> Iterator[trace.Span]:
    """Open a span, record allowlisted kwargs, and set status from the outcome."""
    tracer = trace.get_tracer(_TRACER_NAME)
    with tracer.start_as_current_span(
        name, record_exception=False, set_status_on_exception=False
    ) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key, value)
        for key, value in kwargs.items():
            if not key.startswith("_") and key.lower() in _SAFE_SPAN_ATTR_KEYS:
                span.set_attribute(f"arg.{key}", str(value))
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
        span.set_status(Status(StatusCode.OK))


def traced(
    operation_name: str | None = None,
    attributes: dict | None = None,
) -> Callable:
    """Decorator to create a span for a function (sync or async).

    Args:
        operation_name: Span name (defaults to module.funcname).
        attributes: Optional dict of attributes to set on the span.

    Returns:
        Decorated function.
    """

    def decorator(func: Callable) -> Callable:
        span_name = operation_name or f"{func.__module__}.{func.__name__}"

        if asyncio.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _span(span_name, attributes, kwargs):
                    return await func(*args, **kwargs)

            return async_wrapper

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with _span(span_name, attributes, kwargs):
                return func(*args, **kwargs)

        return sync_wrapper

    return decorator


def add_span_attributes(**attributes: str | int | float | bool) -> None:
    """Add attributes to the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        for key, value in attributes.items():
            span.set_attribute(key, value)


def add_span_event(name: str, attributes: dict | None = None) -> None:
    """Add an event to the current span."""
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(name, attributes=attributes or {})
