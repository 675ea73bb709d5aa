"""Lead -> client conversion: promote the customer, provision onboarding, send welcome."""

from __future__ import annotations

from typing import Any

from opsflow.application.dtos.customer import CustomerResult
from opsflow.application.dtos.workflow import HandlerResult
from opsflow.application.services.formatting import resolve_customer_display_name
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
)
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.enums import LeadStatus
from opsflow.domain.exceptions import (
    ResourceNotFoundException,
    WorkflowPreconditionException,
)
from opsflow.shared.enums import WorkflowKey

CLIENT_STATUSES = frozenset(
    {LeadStatus.QUALIFIED.value, LeadStatus.CLOSED_WON.value, "CLIENT", "CUSTOMER"}
)
DEAL_EVENT_TYPES = frozenset({"status_changed", "converted"})
CONTACT_EVENT_TYPES = frozenset({"created", "updated", "status_changed"})
CUSTOMER_ID_FIELDS = ("customerId", "clientId", "contactId", "id")


def build_lead_to_client_variables(
    *,
    organization_name: str,
    customer: CustomerResult,
    project_link: str,
    project_folder_link: str,
    account_manager_name: str,
    account_manager_email: str | None,
) -> dict[str, Any]:
    return {
        "clientName": resolve_customer_display_name(
            customer.first_name, customer.last_name, customer.company
        )
        or "Client",
        "companyName": organization_name,
        "projectFolderLink": project_folder_link,
        "accountManagerName": account_manager_name,
        "accountManagerEmail": account_manager_email or "",
        "projectLaunchLink": project_link,
    }


class LeadToClientHandler:
    key = WorkflowKey.LEAD_TO_CLIENT

    def matches(self, event: WorkflowEvent) -> bool:
        if event.normalized_module != "crm":
            return False
        entity = event.normalized_entity_type
        event_type = event.normalized_event_type
        if entity == "deal":
            if event_type not in DEAL_EVENT_TYPES:
                return False
        elif entity == "contact":
            if event_type not in CONTACT_EVENT_TYPES:
                return False
        else:
            return False
        return extract_status(event.payload) in CLIENT_STATUSES

    async def execute(self, context: ExecutionContext) -> HandlerResult:
        payload = context.payload
        operations = context.operations
        organization_id = context.organization_id

        customer_id = first_string(payload, *CUSTOMER_ID_FIELDS)
        if not customer_id:
            raise WorkflowPreconditionException(
                self.key.value, "Lead conversion event missing customerId", field="customerId"
            )

        promotion = await operations.promote_customer_to_client(organization_id, customer_id)
        customer = await operations.get_customer(organization_id, customer_id)
        if customer is None:
            raise ResourceNotFoundException("customer", customer_id)

        display_name = (
            resolve_customer_display_name(customer.first_name, customer.last_name, customer.company)
            or "Client"
        )
        project = await operations.ensure_onboarding_project(
            organization_id,
            customer_id,
            first_string(payload, "projectName") or f"{display_name} - Onboarding",
            start_date=first_date(payload, "projectStartDate", "startDate"),
            created_by_id=context.event.user_id,
            deal_value=payload.get("value"),
            currency=first_string(payload, "currency"),
            description=first_string(payload, "summary", "notes"),
        )

        details: dict[str, Any] = {
            "workflow": self.key.value,
            "promotion": promotion,
            "project": project,
        }
        recipient = extract_string(customer.email) or first_email(payload, "customerEmail")
        if not recipient:
            details.update(skippedNotification=True, reason="No customer email available")
            return HandlerResult(details=details)

        variables = build_lead_to_client_variables(
            organization_name=context.organization_name,
            customer=customer,
            project_link=context.link(f"/projects/{project.project_id}"),
            project_folder_link=first_string(payload, "projectFolderLink")
            or context.link(f"/projects/{project.project_id}/files"),
            account_manager_name=context.triggering_user_name
            or first_string(payload, "ownerName", "accountManagerName")
            or "Your team",
            account_manager_email=context.triggering_user_email
            or first_email(payload, "ownerEmail", "accountManagerEmail"),
        )
        rendered, email = await send_workflow_email(
            context, recipient, variables, "Failed to send conversion email"
        )
        details["messageId"] = email.message_id
        return HandlerResult(
            recipient=recipient, subject=rendered.subject, email=email, details=details
        )
