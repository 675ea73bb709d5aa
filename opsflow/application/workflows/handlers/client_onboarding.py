"""Client onboarding: welcome a newly created CRM client with kickoff steps."""

from __future__ import annotations

from typing import Any

from opsflow.application.dtos.customer import CustomerResult
from opsflow.application.dtos.project import ProjectProvisionResult
from opsflow.application.dtos.workflow import HandlerResult
from opsflow.application.services.formatting import resolve_customer_display_name
from opsflow.application.services.payload_extractors import first_email, first_string
from opsflow.application.workflows.handlers.base import (
    ExecutionContext,
    send_workflow_email,
)
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.exceptions import WorkflowPreconditionException
from opsflow.shared.enums import WorkflowKey

CLIENT_ENTITIES = frozenset({"customer", "client", "contact"})
EMAIL_FIELDS = ("email", "customerEmail", "primaryContactEmail", "contactEmail")
CUSTOMER_ID_FIELDS = ("customerId", "clientId", "contactId", "id")


def resolve_client_name(customer: CustomerResult | None, payload: dict[str, Any]) -> str:
    if customer is not None:
        name = resolve_customer_display_name(
            customer.first_name, customer.last_name, customer.company
        )
        if name:
            return name
    return (
        resolve_customer_display_name(
            first_string(payload, "firstName"),
            first_string(payload, "lastName"),
            first_string(payload, "company"),
        )
        or first_string(payload, "name", "clientName")
        or "Client"
    )


def build_client_onboarding_variables(
    context: ExecutionContext,
    *,
    client_name: str,
    customer_id: str | None,
    project: ProjectProvisionResult | None,
) -> dict[str, Any]:
    payload = context.payload
    if customer_id:
        contract_link = context.link(f"/crm/customers/{customer_id}/contracts")
    else:
        contract_link = context.link("/crm/contracts")
    if project is not None:
        document_link = context.link(f"/projects/{project.project_id}/files")
    else:
        document_link = context.link("/documents")
    return {
        "clientName": client_name,
        "companyName": context.organization_name,
        "contractLink": first_string(payload, "contractLink") or contract_link,
        "documentPortalLink": first_string(payload, "documentPortalLink") or document_link,
        "paymentSetupLink": first_string(payload, "paymentSetupLink")
        or context.link("/finance/payment-setup"),
        "onboardingOwnerName": context.triggering_user_name
        or first_string(payload, "onboardingOwnerName", "ownerName")
        or "Onboarding team",
    }


class ClientOnboardingHandler:
    key = WorkflowKey.CLIENT_ONBOARDING

    def matches(self, event: WorkflowEvent) -> bool:
        if event.normalized_module != "crm":
            return False
        if event.normalized_entity_type not in CLIENT_ENTITIES:
            return False
        if event.normalized_event_type != "created":
            return False
        return first_email(event.payload, *EMAIL_FIELDS) is not None

    async def execute(self, context: ExecutionContext) -> HandlerResult:
        payload = context.payload
        operations = context.operations
        organization_id = context.organization_id

        recipient = first_email(payload, *EMAIL_FIELDS)
        if not recipient:
            raise WorkflowPreconditionException(
                self.key.value, "Client onboarding requires a client email", field="email"
            )

        customer_id = first_string(payload, *CUSTOMER_ID_FIELDS)
        customer = (
            await operations.get_customer(organization_id, customer_id) if customer_id else None
        )
        client_name = resolve_client_name(customer, payload)

        project: ProjectProvisionResult | None = None
        if customer is not None:
            project = await operations.ensure_onboarding_project(
                organization_id,
                customer.id,
                first_string(payload, "projectName") or f"{client_name} - Onboarding",
                created_by_id=context.event.user_id,
                currency=first_string(payload, "currency"),
            )

        variables = build_client_onboarding_variables(
            context, client_name=client_name, customer_id=customer_id, project=project
        )
        rendered, email = await send_workflow_email(
            context, recipient, variables, "Failed to send onboarding email"
        )
        return HandlerResult(
            recipient=recipient,
            subject=rendered.subject,
            email=email,
            details={
                "workflow": self.key.value,
                "customerId": customer.id if customer else customer_id,
                "project": project,
                "messageId": email.message_id,
            },
        )
