"""Invoice tracking: draft the invoice for a completed project and email it."""

from __future__ import annotations

from typing import Any

from opsflow.application.dtos.customer import CustomerResult
from opsflow.application.dtos.invoice import InvoiceDraftResult
from opsflow.application.dtos.project import ProjectResult
from opsflow.application.dtos.workflow import HandlerResult
from opsflow.application.services.formatting import (
    format_currency,
    format_date,
    resolve_customer_display_name,
    title_case_status,
)
from opsflow.application.services.payload_extractors import (
    extract_decimal,
    extract_string,
    first_email,
    first_string,
)
from opsflow.application.workflows.handlers.base import (
    ExecutionContext,
    send_workflow_email,
    skipped_notification,
)
from opsflow.application.workflows.handlers.project_lifecycle import (
    is_project_completion,
    load_project_customer,
)
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.exceptions import (
    ResourceNotFoundException,
    WorkflowPreconditionException,
)
from opsflow.shared.enums import WorkflowKey

DEFAULT_REMINDER_DAYS = 7


def resolve_reminder_days(payload: dict[str, Any]) -> int:
    days = extract_decimal(payload.get("reminderDays"))
    if days is None or days <= 0:
        return DEFAULT_REMINDER_DAYS
    return int(days)


def build_invoice_tracking_variables(
    context: ExecutionContext,
    project: ProjectResult,
    invoice: InvoiceDraftResult,
    customer: CustomerResult,
) -> dict[str, Any]:
    invoice_link = context.link(f"/finance/invoices/{invoice.invoice_id}")
    return {
        "clientName": resolve_customer_display_name(
            customer.first_name, customer.last_name, customer.company
        )
        or "Client",
        "companyName": context.organization_name,
        "projectName": project.name,
        "invoiceNumber": invoice.invoice_number,
        "invoiceAmount": format_currency(invoice.amount, invoice.currency),
        "invoiceDueDate": format_date(invoice.due_date) or "Upon receipt",
        "invoiceStatus": title_case_status(invoice.status),
        "invoiceLink": invoice_link,
        "invoicePaymentLink": first_string(context.payload, "invoicePaymentLink") or invoice_link,
        "reminderDays": resolve_reminder_days(context.payload),
        "financeOwnerName": context.triggering_user_name or "Finance team",
    }


class InvoiceTrackingHandler:
    key = WorkflowKey.INVOICE_TRACKING

    def matches(self, event: WorkflowEvent) -> bool:
        return is_project_completion(event)

    async def execute(self, context: ExecutionContext) -> HandlerResult:
        payload = context.payload
        operations = context.operations
        organization_id = context.organization_id

        project_id = first_string(payload, "id", "projectId")
        if not project_id:
            raise WorkflowPreconditionException(
                self.key.value, "Invoice tracking workflow requires a project ID", field="id"
            )
        project = await operations.get_project(organization_id, project_id)
        if project is None:
            raise ResourceNotFoundException("project", project_id)

        customer = await load_project_customer(context, project)
        if customer is None:
            return skipped_notification(context, "No customer record", projectId=project_id)

        recipient = extract_string(customer.email) or first_email(
            payload, "customerEmail", "primaryContactEmail"
        )
        if not recipient:
            return skipped_notification(
                context, "No customer email available", projectId=project_id
            )

        invoice = await operations.create_project_invoice(
            organization_id, project, customer, created_by_id=context.event.user_id
        )
        if invoice is None:
            return skipped_notification(
                context, "Project has no positive budget to invoice", projectId=project_id
            )

        variables = build_invoice_tracking_variables(context, project, invoice, customer)
        rendered, email = await send_workflow_email(
            context, recipient, variables, "Failed to send invoice email"
        )
        return HandlerResult(
            recipient=recipient,
            subject=rendered.subject,
            email=email,
            details={
                "workflow": self.key.value,
                "projectId": project_id,
                "invoiceId": invoice.invoice_id,
                "invoiceNumber": invoice.invoice_number,
                "invoiceCreated": invoice.created,
                "messageId": email.message_id,
            },
        )
