"""Internal health digest: weekly operations snapshot for the leadership team."""

from __future__ import annotations

from typing import Any

from opsflow.application.dtos.invoice import OperationsSnapshot
from opsflow.application.dtos.workflow import HandlerResult
from opsflow.application.services.formatting import pluralize
from opsflow.application.services.payload_extractors import (
    extract_string,
    first_email,
    first_string,
)
from opsflow.application.workflows.handlers.base import (
    ExecutionContext,
    send_workflow_email,
)
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.exceptions import WorkflowPreconditionException
from opsflow.shared.enums import WorkflowKey

HEALTH_MODULES = frozenset({"operations", "projects", "finance", "system", "analytics"})
HEALTH_EVENT_TYPES = frozenset({"created", "updated", "status_changed"})
HEALTH_MARKER = WorkflowKey.INTERNAL_HEALTH.value


def is_internal_health_snapshot(event: WorkflowEvent) -> bool:
    """True when the event is explicitly flagged as a health snapshot."""
    payload = event.payload
    if event.normalized_entity_type in (HEALTH_MARKER, "health"):
        return True
    snapshot_key = extract_string(payload.get("snapshotKey"))
    category = extract_string(payload.get("category"))
    if snapshot_key and snapshot_key.lower() == HEALTH_MARKER:
        return True
    if category and category.lower() == HEALTH_MARKER:
        return True
    return payload.get("internalHealth") is True


def build_internal_health_variables(
    context: ExecutionContext, snapshot: OperationsSnapshot
) -> dict[str, Any]:
    payload = context.payload
    if snapshot.projects_at_risk_count > 0:
        insight_one = f"{pluralize(snapshot.projects_at_risk_count, 'project')} need attention"
        focus_two = "Schedule client check-ins for at-risk projects"
    else:
        insight_one = "Project delivery is on track"
        focus_two = "Continue nurturing active client relationships"
    if snapshot.overdue_invoice_count > 0:
        insight_two = f"{pluralize(snapshot.overdue_invoice_count, 'invoice')} awaiting payment"
    else:
        insight_two = "All invoices are current"
    if snapshot.overdue_task_count > 0:
        focus_one = "Resolve overdue tasks to reduce risk"
    else:
        focus_one = "Review upcoming milestones with project owners"

    return {
        "companyName": context.organization_name,
        "operationsLeadName": first_string(payload, "operationsLeadName")
        or context.triggering_user_name
        or "Operations team",
        "operationsLeadEmail": first_email(payload, "operationsLeadEmail")
        or context.triggering_user_email
        or "",
        "healthDashboardLink": context.link("/reports/operations"),
        "currentProjectCount": snapshot.active_project_count,
        "projectsAtRiskCount": snapshot.projects_at_risk_count,
        "overdueInvoiceCount": snapshot.overdue_invoice_count,
        "activeClientCount": snapshot.active_client_count,
        "overdueTaskCount": snapshot.overdue_task_count,
        "topInsightLineOne": first_string(payload, "topInsightLineOne") or insight_one,
        "topInsightLineTwo": first_string(payload, "topInsightLineTwo") or insight_two,
        "focusAreaOne": first_string(payload, "focusAreaOne") or focus_one,
        "focusAreaTwo": first_string(payload, "focusAreaTwo") or focus_two,
    }


class InternalHealthHandler:
    key = WorkflowKey.INTERNAL_HEALTH

    def matches(self, event: WorkflowEvent) -> bool:
        if event.normalized_module not in HEALTH_MODULES:
            return False
        if event.normalized_event_type not in HEALTH_EVENT_TYPES:
            return False
        return is_internal_health_snapshot(event)

    async def execute(self, context: ExecutionContext) -> HandlerResult:
        recipient = first_email(
            context.payload,
            "recipientEmail",
            "recipientEmails",
            "operationsLeadEmail",
            "ownerEmail",
        ) or extract_string(context.triggering_user_email)
        if not recipient:
            raise WorkflowPreconditionException(
                self.key.value,
                "Internal health workflow requires at least one recipient email",
                field="recipientEmail",
            )

        snapshot = await context.operations.compute_operations_snapshot(context.organization_id)
        variables = build_internal_health_variables(context, snapshot)
        rendered, email = await send_workflow_email(
            context, recipient, variables, "Failed to send internal health report email"
        )
        return HandlerResult(
            recipient=recipient,
            subject=rendered.subject,
            email=email,
            details={
                "workflow": self.key.value,
                "snapshot": snapshot,
                "messageId": email.message_id,
            },
        )
