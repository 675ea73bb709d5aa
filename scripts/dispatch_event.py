"""Dispatch one workflow event read from a JSON file (or stdin) and print the summaries.

Usage:
    python -m scripts.dispatch_event path/to/event.json
    cat event.json | python -m scripts.dispatch_event -
The JSON object uses the upstream event shape:
    {"organizationId": "...", "module": "projects", "entityType": "project",
     "eventType": "status_changed", "payload": {...}, "userId": "..."}
Requires Postgres (DATABASE_URL).
"""

import asyncio
import json
import sys

from pydantic import ValidationError

from opsflow.core.config import get_settings
from opsflow.domain.exceptions import OpsflowException
import opsflow.infrastructure.persistence.database as database
from opsflow.infrastructure.composition import dispatch_event
from opsflow.schemas import ExecutionSummaryOut, WorkflowEventIn
from opsflow.shared.telemetry import configure_tracing, setup_logging


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


async def main() -> None:
    """Validate the event, run the dispatcher in one transaction and print JSON summaries."""
    setup_logging()
    configure_tracing(get_settings())
    if len(sys.argv) < 2:
        print("Usage: python -m scripts.dispatch_event <event.json|->", file=sys.stderr)
        sys.exit(2)
    try:
        event_in = WorkflowEventIn.model_validate_json(_read_source(sys.argv[1]))
        event = event_in.to_entity()
    except (OSError, ValidationError, OpsflowException) as e:
        print(f"Invalid event: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        summaries = await dispatch_event(event)
    except OpsflowException as e:
        print(f"Dispatch failed: {e.message}", file=sys.stderr)
        sys.exit(1)
    finally:
        await database.dispose_engine()

    out = [ExecutionSummaryOut.model_validate(s).model_dump() for s in summaries]
    print(json.dumps(out, indent=2))


if __name__ == "__main__":
    asyncio.run(main())
