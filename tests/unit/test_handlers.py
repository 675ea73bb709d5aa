"""Tests for each handler's execute path against in-memory repositories."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from opsflow.application.dtos.user import UserContact
from opsflow.application.workflows.handlers.client_onboarding import ClientOnboardingHandler
from opsflow.application.workflows.handlers.contract_renewal import ContractRenewalHandler
from opsflow.application.workflows.handlers.internal_health import InternalHealthHandler
from opsflow.application.workflows.handlers.invoice_tracking import InvoiceTrackingHandler
from opsflow.application.workflows.handlers.lead_to_client import LeadToClientHandler
from opsflow.application.workflows.handlers.project_lifecycle import ProjectLifecycleHandler
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.enums import CustomerType, LeadStatus, ProjectStatus
from opsflow.domain.exceptions import (
    NotificationDeliveryException,
    ResourceNotFoundException,
    WorkflowPreconditionException,
)

GRACE = UserContact(id="user-1", name="Grace Hopper", email="grace@acme.test")


def _event(module: str, entity_type: str, event_type: str, payload: dict, user_id=None):
    return WorkflowEvent(
        organization_id="org-1",
        module=module,
        entity_type=entity_type,
        event_type=event_type,
        payload=payload,
        user_id=user_id,
    )


# Lead to client


async def test_lead_to_client_promotes_provisions_and_welcomes(store) -> None:
    store.customers.add()
    event = _event(
        "crm", "deal", "status_changed",
        {"customerId": "cust-1", "status": "closed_won", "value": 2500},
        user_id="user-1",
    )
    handler = LeadToClientHandler()
    result = await handler.execute(
        store.context(event, handler.key.value, triggering_user=GRACE)
    )

    customer = store.customers.customers["cust-1"]
    assert customer.type == CustomerType.CUSTOMER.value
    assert customer.status == LeadStatus.QUALIFIED.value
    project = store.projects.projects["project-1"]
    assert project.name == "Ada Lovelace - Onboarding"
    assert project.budget == Decimal("2500")
    assert len(store.tasks.tasks) == 3

    assert result.recipient == "ada@example.com"
    assert result.subject == "Welcome to Acme Studio - your onboarding is ready"
    to, subject, html = store.sender.sent[0]
    assert to == "ada@example.com"
    assert "https://app.test/projects/project-1/files" in html
    assert "Grace Hopper (grace@acme.test)" in html
    assert result.details["promotion"].was_updated is True
    assert result.details["project"].created is True


async def test_lead_to_client_requires_customer_id(store) -> None:
    handler = LeadToClientHandler()
    event = _event("crm", "deal", "status_changed", {"status": "CLOSED_WON"})
    with pytest.raises(WorkflowPreconditionException):
        await handler.execute(store.context(event, handler.key.value))


async def test_lead_to_client_without_email_skips_notification(store) -> None:
    store.customers.add(email=None)
    handler = LeadToClientHandler()
    event = _event("crm", "contact", "updated", {"id": "cust-1", "stage": "qualified"})
    result = await handler.execute(store.context(event, handler.key.value))
    assert result.recipient is None
    assert result.details["skippedNotification"] is True
    assert store.sender.sent == []
    assert store.customers.customers["cust-1"].type == CustomerType.CUSTOMER.value


# Client onboarding


async def test_client_onboarding_provisions_project_for_known_customer(store) -> None:
    store.customers.add(type=CustomerType.CUSTOMER.value)
    handler = ClientOnboardingHandler()
    event = _event("crm", "customer", "created", {"id": "cust-1", "email": "new@client.test"})
    result = await handler.execute(store.context(event, handler.key.value))

    assert result.recipient == "new@client.test"
    assert result.subject == "Welcome aboard - onboarding steps inside"
    assert result.details["project"].created is True
    html = store.sender.sent[0][2]
    assert "Hi Ada Lovelace," in html
    assert "https://app.test/crm/customers/cust-1/contracts" in html
    assert "https://app.test/projects/project-1/files" in html


async def test_client_onboarding_for_unknown_customer_uses_payload_name(store) -> None:
    handler = ClientOnboardingHandler()
    event = _event(
        "crm", "contact", "created",
        {"contactEmail": "lin@client.test", "firstName": "Lin", "lastName": "Wu"},
    )
    result = await handler.execute(store.context(event, handler.key.value))

    assert result.details["project"] is None
    assert store.projects.projects == {}
    html = store.sender.sent[0][2]
    assert "Hi Lin Wu," in html
    assert "https://app.test/documents" in html


# Project lifecycle


async def test_project_created_seeds_tasks_and_owner(store) -> None:
    store.customers.add()
    store.projects.add(status=ProjectStatus.PLANNED.value)
    handler = ProjectLifecycleHandler()
    event = _event("projects", "project", "created", {"id": "p1"})
    result = await handler.execute(store.context(event, handler.key.value))

    assert result.details["seededTaskCount"] == 3
    assert store.resources.resources == {("p1", "user-1"): ("Owner", 100)}
    assert result.subject == "Project Website Redesign is in motion"
    assert result.recipient == "ada@example.com"
    html = store.sender.sent[0][2]
    assert "https://app.test/projects/p1" in html
    assert "Current stage: PLANNED" in html
    assert "due Soon" in html


async def test_project_completion_stamps_end_date(store) -> None:
    store.customers.add()
    store.projects.add()
    handler = ProjectLifecycleHandler()
    event = _event("projects", "project", "status_changed", {"id": "p1", "status": "COMPLETED"})
    result = await handler.execute(store.context(event, handler.key.value))

    assert result.details["endDateStamped"] is True
    assert result.details["seededTaskCount"] == 0
    assert store.projects.projects["p1"].end_date == datetime(2025, 3, 14, 9, 30, tzinfo=UTC)


async def test_project_lifecycle_missing_project_raises(store) -> None:
    handler = ProjectLifecycleHandler()
    event = _event("projects", "project", "created", {"id": "missing"})
    with pytest.raises(ResourceNotFoundException):
        await handler.execute(store.context(event, handler.key.value))


async def test_project_lifecycle_without_recipient_skips(store) -> None:
    store.projects.add(customer_id=None)
    handler = ProjectLifecycleHandler()
    event = _event("projects", "project", "created", {"id": "p1"})
    result = await handler.execute(store.context(event, handler.key.value))
    assert result.details["skippedNotification"] is True
    assert result.details["seededTaskCount"] == 3
    assert store.sender.sent == []


# Invoice tracking


async def test_invoice_tracking_drafts_invoice_and_emails(store) -> None:
    store.customers.add()
    store.projects.add()
    handler = InvoiceTrackingHandler()
    event = _event("projects", "project", "status_changed", {"id": "p1", "status": "COMPLETED"})
    result = await handler.execute(store.context(event, handler.key.value))

    assert result.subject == "Invoice INV-202503-1 for Website Redesign"
    assert result.details["invoiceCreated"] is True
    html = store.sender.sent[0][2]
    assert "Amount due: $5,000.00" in html
    assert "Due date: Apr 13, 2025" in html
    assert "https://app.test/finance/invoices/inv-1" in html
    assert "after 7 days" in html


async def test_invoice_tracking_skips_without_budget(store) -> None:
    store.customers.add()
    store.projects.add(budget=None)
    handler = InvoiceTrackingHandler()
    event = _event("projects", "project", "status_changed", {"id": "p1", "status": "COMPLETED"})
    result = await handler.execute(store.context(event, handler.key.value))
    assert result.details["skippedNotification"] is True
    assert result.details["reason"] == "Project has no positive budget to invoice"
    assert store.invoices.invoices == []


async def test_invoice_tracking_skips_without_customer(store) -> None:
    store.projects.add(customer_id=None)
    handler = InvoiceTrackingHandler()
    event = _event("projects", "project", "status_changed", {"id": "p1", "status": "COMPLETED"})
    result = await handler.execute(store.context(event, handler.key.value))
    assert result.details["reason"] == "No customer record"


async def test_invoice_tracking_delivery_failure_raises(store) -> None:
    store.customers.add()
    store.projects.add()
    store.sender.fail_with = "quota exceeded"
    handler = InvoiceTrackingHandler()
    event = _event("projects", "project", "status_changed", {"id": "p1", "status": "COMPLETED"})
    with pytest.raises(NotificationDeliveryException, match="quota exceeded"):
        await handler.execute(store.context(event, handler.key.value))


# Contract renewal


async def test_contract_renewal_creates_draft_and_reminds(store) -> None:
    store.customers.add(type=CustomerType.CUSTOMER.value)
    handler = ContractRenewalHandler()
    event = _event(
        "crm", "contract", "updated",
        {"customerId": "cust-1", "renewalDate": "2025-07-01", "amount": 900,
         "serviceName": "Support plan"},
    )
    result = await handler.execute(store.context(event, handler.key.value))

    assert result.subject == "Renewal coming up on Jul 1, 2025"
    assert result.recipient == "ada@example.com"
    draft = result.details["invoiceDraft"]
    assert draft.created is True
    assert draft.amount == Decimal("900")
    assert draft.due_date == datetime(2025, 7, 1, tzinfo=UTC)
    html = store.sender.sent[0][2]
    assert "Support plan renews on Jul 1, 2025" in html
    assert f"https://app.test/finance/invoices/{draft.invoice_id}" in html


async def test_contract_renewal_redelivery_reuses_draft(store) -> None:
    store.customers.add()
    handler = ContractRenewalHandler()
    event = _event(
        "crm", "contract", "updated",
        {"customerId": "cust-1", "renewalDate": "2025-07-01", "amount": "900"},
    )
    await handler.execute(store.context(event, handler.key.value))
    second = await handler.execute(store.context(event, handler.key.value))
    assert second.details["invoiceDraft"].created is False
    assert len(store.invoices.invoices) == 1


async def test_contract_renewal_requires_customer_id(store) -> None:
    handler = ContractRenewalHandler()
    event = _event("crm", "contract", "updated", {"renewalDate": "2025-07-01"})
    with pytest.raises(WorkflowPreconditionException):
        await handler.execute(store.context(event, handler.key.value))


async def test_contract_renewal_unknown_customer_raises(store) -> None:
    handler = ContractRenewalHandler()
    event = _event(
        "crm", "contract", "updated", {"customerId": "ghost", "renewalDate": "2025-07-01"}
    )
    with pytest.raises(ResourceNotFoundException):
        await handler.execute(store.context(event, handler.key.value))


async def test_contract_renewal_requires_recipient(store) -> None:
    store.customers.add(email=None)
    handler = ContractRenewalHandler()
    event = _event(
        "crm", "contract", "updated", {"customerId": "cust-1", "renewalDate": "2025-07-01"}
    )
    with pytest.raises(WorkflowPreconditionException, match="recipient"):
        await handler.execute(store.context(event, handler.key.value))


# Internal health


async def test_internal_health_sends_snapshot(store) -> None:
    handler = InternalHealthHandler()
    event = _event(
        "operations", "internal-health", "created", {"operationsLeadEmail": "ops@acme.test"}
    )
    result = await handler.execute(store.context(event, handler.key.value))

    assert result.recipient == "ops@acme.test"
    assert result.subject == "Weekly operations snapshot"
    assert result.details["snapshot"].active_client_count == 7
    html = store.sender.sent[0][2]
    assert "Projects at risk: 1" in html
    assert "1 project need attention" in html
    assert "2 invoices awaiting payment" in html


async def test_internal_health_falls_back_to_triggering_user(store) -> None:
    handler = InternalHealthHandler()
    event = _event("operations", "health", "updated", {}, user_id="user-1")
    result = await handler.execute(
        store.context(event, handler.key.value, triggering_user=GRACE)
    )
    assert result.recipient == "grace@acme.test"


async def test_internal_health_requires_recipient(store) -> None:
    handler = InternalHealthHandler()
    event = _event("operations", "internal-health", "created", {})
    with pytest.raises(WorkflowPreconditionException):
        await handler.execute(store.context(event, handler.key.value))
