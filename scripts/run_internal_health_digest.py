"""Run the internal health digest: emit a health snapshot event for every tenant that enabled it.

Usage:
    python -m scripts.run_internal_health_digest [recipient_email] [organization_id]
Without recipient_email the handler falls back to the payload/triggering user and
records a FAILED run when none resolves. Intended for a weekly scheduler.
Requires Postgres (DATABASE_URL).
"""

import asyncio
import sys

import opsflow.infrastructure.persistence.database as database
from opsflow.core.config import get_settings
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.infrastructure.composition import build_workflow_engine
from opsflow.infrastructure.persistence.repositories import WorkflowConfigRepository
from opsflow.shared.enums import WorkflowKey
from opsflow.shared.telemetry import configure_tracing, setup_logging
from opsflow.shared.utils.datetime import utc_now


def build_health_event(organization_id: str, recipient: str | None) -> WorkflowEvent:
    payload: dict[str, object] = {"snapshotKey": WorkflowKey.INTERNAL_HEALTH.value}
    if recipient:
        payload["operationsLeadEmail"] = recipient
    return WorkflowEvent(
        organization_id=organization_id,
        module="operations",
        entity_type=WorkflowKey.INTERNAL_HEALTH.value,
        event_type="created",
        payload=payload,
        triggered_at=utc_now(),
    )


async def main() -> None:
    """For each tenant with the digest enabled, dispatch one health event in its own transaction."""
    setup_logging()
    configure_tracing(get_settings())
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)
    recipient = sys.argv[1] if len(sys.argv) > 1 else None
    organization_filter = sys.argv[2] if len(sys.argv) > 2 else None

    # Fetch enabled tenants in a short-lived transaction
    async with database.AsyncSessionLocal() as session:
        async with session.begin():
            config_repo = WorkflowConfigRepository(session)
            organization_ids = await config_repo.list_enabled_organization_ids(
                WorkflowKey.INTERNAL_HEALTH.value
            )
    if organization_filter:
        organization_ids = [o for o in organization_ids if o == organization_filter]
        if not organization_ids:
            print(
                f"Internal health digest not enabled for: {organization_filter}",
                file=sys.stderr,
            )
            sys.exit(1)

    sent = 0
    failed = 0
    for organization_id in organization_ids:
        async with database.AsyncSessionLocal() as session:
            async with session.begin():
                engine = build_workflow_engine(session)
                summaries = await engine.execute(
                    build_health_event(organization_id, recipient)
                )
        for summary in summaries:
            if summary.success:
                sent += 1
            else:
                failed += 1
                print(
                    f"Organization {organization_id}: {summary.error}",
                    file=sys.stderr,
                )

    await database.dispose_engine()
    print(f"Done. Digests sent: {sent}, failed: {failed}")


if __name__ == "__main__":
    asyncio.run(main())
