"""Project lifecycle: seed the board on creation, stamp completion, notify the client."""

from __future__ import annotations

from typing import Any

from opsflow.application.dtos.customer import CustomerResult
from opsflow.application.dtos.project import ProjectResult
from opsflow.application.dtos.workflow import HandlerResult
from opsflow.application.services.formatting import (
    format_date,
    resolve_customer_display_name,
)
from opsflow.application.services.payload_extractors import (
    extract_status,
    extract_string,
    first_date,
    first_email,
    first_string,
)
from opsflow.application.workflows.handlers.base import (
    ExecutionContext,
    send_workflow_email,
    skipped_notification,
)
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.enums import ProjectStatus
from opsflow.domain.exceptions import (
    ResourceNotFoundException,
    WorkflowPreconditionException,
)
from opsflow.shared.enums import WorkflowKey

PAYLOAD_CUSTOMER_ID_FIELDS = ("customerId", "clientId", "contactId")


def is_project_completion(event: WorkflowEvent) -> bool:
    """projects/project status_changed with a COMPLETED status."""
    return (
        event.normalized_module == "projects"
        and event.normalized_entity_type == "project"
        and event.normalized_event_type == "status_changed"
        and extract_status(event.payload) == ProjectStatus.COMPLETED.value
    )


async def load_project_customer(
    context: ExecutionContext, project: ProjectResult
) -> CustomerResult | None:
    """Project's linked customer, else the customer named in the payload."""
    customer_id = project.customer_id or first_string(
        context.payload, *PAYLOAD_CUSTOMER_ID_FIELDS
    )
    if not customer_id:
        return None
    return await context.operations.get_customer(context.organization_id, customer_id)


def build_project_lifecycle_variables(
    context: ExecutionContext,
    project: ProjectResult,
    customer: CustomerResult | None,
) -> dict[str, Any]:
    payload = context.payload
    client_name = None
    if customer is not None:
        client_name = resolve_customer_display_name(
            customer.first_name, customer.last_name, customer.company
        )
    return {
        "clientName": client_name or "Client",
        "companyName": context.organization_name,
        "projectName": project.name,
        "projectBoardLink": context.link(f"/projects/{project.id}"),
        "projectOwnerName": context.triggering_user_name
        or first_string(payload, "projectOwnerName")
        or "Project team",
        "projectStage": first_string(payload, "statusLabel", "status") or project.status,
        "nextMilestoneName": first_string(payload, "nextMilestoneName") or "Kickoff complete",
        "nextMilestoneDueDate": format_date(first_date(payload, "nextMilestoneDueDate"))
        or "Soon",
    }


class ProjectLifecycleHandler:
    key = WorkflowKey.PROJECT_LIFECYCLE

    def matches(self, event: WorkflowEvent) -> bool:
        if event.normalized_module != "projects" or event.normalized_entity_type != "project":
            return False
        if event.normalized_event_type == "created":
            return True
        return is_project_completion(event)

    async def execute(self, context: ExecutionContext) -> HandlerResult:
        payload = context.payload
        operations = context.operations
        organization_id = context.organization_id

        project_id = first_string(payload, "projectId", "id")
        if not project_id:
            raise WorkflowPreconditionException(
                self.key.value, "Project lifecycle event missing projectId", field="projectId"
            )
        project = await operations.get_project(organization_id, project_id)
        if project is None:
            raise ResourceNotFoundException("project", project_id)

        seeded_task_count = 0
        if context.event.normalized_event_type == "created":
            seeded_task_count = await operations.seed_onboarding_tasks(
                organization_id, project.id, owner_id=project.created_by_id
            )
            await operations.ensure_project_owner_resource(project.id, project.created_by_id)

        status = extract_status(payload) or project.status.upper()
        end_date_stamped = False
        if status == ProjectStatus.COMPLETED.value:
            end_date_stamped = await operations.complete_project(organization_id, project)

        customer = await load_project_customer(context, project)
        recipient = (
            (extract_string(customer.email) if customer else None)
            or first_email(payload, "customerEmail", "primaryContactEmail", "customerEmails")
            or extract_string(context.triggering_user_email)
        )
        if not recipient:
            return skipped_notification(
                context,
                "No customer email available",
                projectId=project.id,
                seededTaskCount=seeded_task_count,
            )

        variables = build_project_lifecycle_variables(context, project, customer)
        rendered, email = await send_workflow_email(
            context, recipient, variables, "Failed to send project update email"
        )
        return HandlerResult(
            recipient=recipient,
            subject=rendered.subject,
            email=email,
            details={
                "workflow": self.key.value,
                "projectId": project.id,
                "seededTaskCount": seeded_task_count,
                "status": status,
                "endDateStamped": end_date_stamped,
                "emailSent": True,
                "messageId": email.message_id,
            },
        )
