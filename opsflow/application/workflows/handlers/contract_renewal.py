"""Contract renewal: queue the renewal invoice draft and remind the client."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from opsflow.application.dtos.customer import CustomerResult
from opsflow.application.dtos.invoice import InvoiceDraftResult
from opsflow.application.dtos.workflow import HandlerResult
from opsflow.application.services.formatting import (
    format_currency,
    format_date,
    resolve_customer_display_name,
)
from opsflow.application.services.payload_extractors import (
    extract_decimal,
    extract_string,
    first_date,
    first_email,
    first_present,
    first_string,
)
from opsflow.application.workflows.handlers.base import (
    ExecutionContext,
    send_workflow_email,
)
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.exceptions import (
    ResourceNotFoundException,
    WorkflowPreconditionException,
)
from opsflow.shared.enums import WorkflowKey

RENEWAL_MODULES = frozenset({"crm", "finance", "projects"})
RENEWAL_ENTITIES = frozenset({"customer", "contract", "subscription", "invoice"})
RENEWAL_EVENT_TYPES = frozenset({"created", "updated", "status_changed"})
RENEWAL_DATE_FIELDS = ("renewalDate", "contractRenewalDate", "nextRenewalDate")
CUSTOMER_ID_FIELDS = ("customerId", "contractCustomerId", "clientId", "contactId", "id")
AMOUNT_FIELDS = ("renewalAmount", "amount", "invoiceAmount", "totalAmount")


def build_contract_renewal_variables(
    context: ExecutionContext,
    customer: CustomerResult,
    invoice_draft: InvoiceDraftResult | None,
    renewal_date: datetime | None,
) -> dict[str, Any]:
    payload = context.payload
    due_date = renewal_date or first_date(payload, "invoiceDueDate") or (
        invoice_draft.due_date if invoice_draft else None
    )

    if invoice_draft is not None:
        draft_link = context.link(f"/finance/invoices/{invoice_draft.invoice_id}")
        amount = invoice_draft.amount
        currency = invoice_draft.currency
    else:
        draft_link = context.link("/finance/invoices")
        amount = extract_decimal(first_present(payload, *AMOUNT_FIELDS))
        currency = first_string(payload, "currency") or "USD"
    formatted_amount = format_currency(amount, currency) if amount is not None else None

    return {
        "clientName": resolve_customer_display_name(
            customer.first_name, customer.last_name, customer.company
        )
        or first_string(payload, "clientName")
        or "Client",
        "companyName": context.organization_name,
        "serviceName": first_string(payload, "serviceName", "planName") or "your services",
        "renewalDate": format_date(due_date)
        or first_string(payload, "renewalDateLabel")
        or "Soon",
        "renewalSummaryLink": first_string(payload, "renewalSummaryLink")
        or context.link(f"/crm/customers/{customer.id}"),
        "accountManagerName": context.triggering_user_name
        or first_string(payload, "accountManagerName")
        or "Account manager",
        "accountManagerEmail": context.triggering_user_email
        or first_email(payload, "accountManagerEmail")
        or "",
        "invoiceDraftLink": first_string(payload, "invoiceDraftLink") or draft_link,
        "invoiceSendDate": format_date(first_date(payload, "invoiceSendDate"))
        or format_date(due_date)
        or "Soon",
        "invoiceNumber": (invoice_draft.invoice_number if invoice_draft else None)
        or first_string(payload, "invoiceNumber")
        or "Pending",
        "renewalAmount": formatted_amount
        or first_string(payload, "renewalAmountLabel")
        or "To be confirmed",
        "invoiceAmount": formatted_amount
        or first_string(payload, "invoiceAmountLabel")
        or "Pending",
    }


class ContractRenewalHandler:
    key = WorkflowKey.CONTRACT_RENEWAL

    def matches(self, event: WorkflowEvent) -> bool:
        if event.normalized_module not in RENEWAL_MODULES:
            return False
        if event.normalized_event_type not in RENEWAL_EVENT_TYPES:
            return False
        if event.normalized_entity_type not in RENEWAL_ENTITIES:
            return False
        return first_date(event.payload, *RENEWAL_DATE_FIELDS) is not None

    async def execute(self, context: ExecutionContext) -> HandlerResult:
        payload = context.payload
        operations = context.operations
        organization_id = context.organization_id

        customer_id = first_string(payload, *CUSTOMER_ID_FIELDS)
        if not customer_id:
            raise WorkflowPreconditionException(
                self.key.value, "Contract renewal workflow requires a customerId", field="customerId"
            )
        customer = await operations.get_customer(organization_id, customer_id)
        if customer is None:
            raise ResourceNotFoundException("customer", customer_id)

        recipient = (
            first_email(payload, "recipientEmail", "recipientEmails", "primaryContactEmail")
            or extract_string(customer.email)
            or first_email(payload, "accountManagerEmail")
            or extract_string(context.triggering_user_email)
        )
        if not recipient:
            raise WorkflowPreconditionException(
                self.key.value, "Contract renewal workflow requires a recipient email"
            )

        renewal_date = first_date(payload, *RENEWAL_DATE_FIELDS)
        invoice_draft = await operations.ensure_renewal_invoice_draft(
            organization_id,
            customer_id,
            amount=first_present(payload, *AMOUNT_FIELDS),
            currency=first_string(payload, "currency"),
            due_date=first_date(payload, "invoiceDueDate", "dueDate") or renewal_date,
            renewal_date=renewal_date,
            description=first_string(payload, "invoiceDescription", "serviceName", "planName"),
            created_by_id=context.event.user_id,
            existing_invoice_id=first_string(payload, "invoiceId"),
        )

        variables = build_contract_renewal_variables(
            context, customer, invoice_draft, renewal_date
        )
        rendered, email = await send_workflow_email(
            context, recipient, variables, "Failed to send renewal email"
        )
        return HandlerResult(
            recipient=recipient,
            subject=rendered.subject,
            email=email,
            details={
                "workflow": self.key.value,
                "customerId": customer_id,
                "renewalDate": renewal_date,
                "invoiceDraft": invoice_draft,
                "messageId": email.message_id,
            },
        )
