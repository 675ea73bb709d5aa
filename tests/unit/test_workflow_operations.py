"""Tests for WorkflowOperations idempotency and invoice numbering."""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from opsflow.application.services.workflow_operations import (
    ONBOARDING_TASKS,
    project_invoice_marker,
    renewal_invoice_marker,
)
from opsflow.domain.enums import CustomerType, InvoiceStatus, LeadStatus, ProjectStatus
from opsflow.domain.exceptions import ResourceNotFoundException

ORG = "org-1"


async def test_promote_customer_sets_type_and_qualified_status(store) -> None:
    store.customers.add(type=CustomerType.LEAD.value, status="NEW")
    result = await store.operations().promote_customer_to_client(ORG, "cust-1")
    assert result.was_updated is True
    assert result.previous_type == CustomerType.LEAD.value
    customer = store.customers.customers["cust-1"]
    assert customer.type == CustomerType.CUSTOMER.value
    assert customer.status == LeadStatus.QUALIFIED.value


async def test_promote_customer_keeps_closed_won_status(store) -> None:
    store.customers.add(type=CustomerType.PROSPECT.value, status=LeadStatus.CLOSED_WON.value)
    await store.operations().promote_customer_to_client(ORG, "cust-1")
    assert store.customers.customers["cust-1"].status == LeadStatus.CLOSED_WON.value


async def test_promote_customer_is_noop_for_existing_client(store) -> None:
    store.customers.add(type=CustomerType.CUSTOMER.value, status=LeadStatus.QUALIFIED.value)
    result = await store.operations().promote_customer_to_client(ORG, "cust-1")
    assert result.was_updated is False
    assert store.customers.update_calls == 0


async def test_promote_customer_missing_raises(store) -> None:
    with pytest.raises(ResourceNotFoundException):
        await store.operations().promote_customer_to_client(ORG, "nope")


async def test_promote_customer_is_tenant_scoped(store) -> None:
    store.customers.add(organization_id="org-2")
    with pytest.raises(ResourceNotFoundException):
        await store.operations().promote_customer_to_client(ORG, "cust-1")


async def test_ensure_onboarding_project_is_idempotent(store) -> None:
    store.customers.add()
    operations = store.operations()

    first = await operations.ensure_onboarding_project(
        ORG, "cust-1", "Ada - Onboarding", created_by_id="user-1", deal_value="1200"
    )
    task_count_after_first = len(store.tasks.tasks)
    second = await operations.ensure_onboarding_project(ORG, "cust-1", "Ada - Onboarding")

    assert first.created is True
    assert first.task_seed_count == len(ONBOARDING_TASKS)
    assert second.created is False
    assert second.project_id == first.project_id
    assert len(store.tasks.tasks) == task_count_after_first
    project = store.projects.projects[first.project_id]
    assert project.status == ProjectStatus.IN_PROGRESS.value
    assert project.budget == Decimal("1200")
    assert project.currency == "USD"


async def test_seed_onboarding_tasks_titles_priorities_and_due_dates(store) -> None:
    created = await store.operations().seed_onboarding_tasks(ORG, "p1", owner_id="user-1")
    assert created == 3
    tasks = [t for _, t in store.tasks.tasks]
    assert [t.title for t in tasks] == [
        "Schedule kickoff call",
        "Collect onboarding documents",
        "Confirm billing preferences",
    ]
    assert [t.priority for t in tasks] == ["HIGH", "MEDIUM", "MEDIUM"]
    assert [t.order for t in tasks] == [1, 2, 3]
    assert tasks[0].due_date == datetime(2025, 3, 17, 9, 30, tzinfo=UTC)
    assert all(t.status == "TODO" and t.assigned_to_id == "user-1" for t in tasks)


async def test_seed_onboarding_tasks_skips_project_with_tasks(store) -> None:
    operations = store.operations()
    await operations.seed_onboarding_tasks(ORG, "p1")
    assert await operations.seed_onboarding_tasks(ORG, "p1") == 0
    assert len(store.tasks.tasks) == 3


async def test_ensure_project_owner_resource(store) -> None:
    operations = store.operations()
    assert await operations.ensure_project_owner_resource("p1", None) is False
    assert await operations.ensure_project_owner_resource("p1", "user-1") is True
    assert await operations.ensure_project_owner_resource("p1", "user-1") is True
    assert store.resources.resources == {("p1", "user-1"): ("Owner", 100)}


async def test_complete_project_stamps_end_date_once(store) -> None:
    project = store.projects.add()
    operations = store.operations()
    assert await operations.complete_project(ORG, project) is True
    completed = store.projects.projects["p1"]
    assert completed.status == ProjectStatus.COMPLETED.value
    assert completed.end_date == datetime(2025, 3, 14, 9, 30, tzinfo=UTC)
    assert await operations.complete_project(ORG, completed) is False


async def test_invoice_numbers_share_prefix_and_increase(store) -> None:
    customer = store.customers.add()
    operations = store.operations()
    numbers = []
    for index in range(4):
        project = store.projects.add(id=f"p{index}")
        draft = await operations.create_project_invoice(ORG, project, customer)
        numbers.append(draft.invoice_number)

    assert len(set(numbers)) == 4
    assert all(n.startswith("INV-202503-") for n in numbers)
    sequence = [int(n.rsplit("-", 1)[1]) for n in numbers]
    assert sequence == sorted(sequence)


async def test_create_project_invoice_draft_fields(store) -> None:
    customer = store.customers.add()
    project = store.projects.add()
    draft = await store.operations().create_project_invoice(
        ORG, project, customer, created_by_id="user-1"
    )
    assert draft.created is True
    assert draft.amount == Decimal("5000")
    assert draft.status == InvoiceStatus.DRAFT.value
    assert draft.due_date == datetime(2025, 4, 13, 9, 30, tzinfo=UTC)
    data = store.invoices.created[0]
    assert data.customer_name == "Ada Lovelace"
    assert data.item_description == "Project: Website Redesign"
    assert data.notes == f"Invoice for project: Website Redesign\n{project_invoice_marker('p1')}"


async def test_create_project_invoice_is_idempotent(store) -> None:
    customer = store.customers.add()
    project = store.projects.add()
    operations = store.operations()
    first = await operations.create_project_invoice(ORG, project, customer)
    second = await operations.create_project_invoice(ORG, project, customer)
    assert second.created is False
    assert second.invoice_id == first.invoice_id
    assert len(store.invoices.invoices) == 1


async def test_project_invoice_lookup_does_not_match_longer_project_id(store) -> None:
    customer = store.customers.add()
    operations = store.operations()
    other = await operations.create_project_invoice(
        ORG, store.projects.add(id="p10", budget=Decimal("800")), customer
    )
    draft = await operations.create_project_invoice(ORG, store.projects.add(), customer)
    assert draft.created is True
    assert draft.invoice_id != other.invoice_id
    assert draft.amount == Decimal("5000")
    assert len(store.invoices.invoices) == 2


async def test_renewal_lookup_does_not_match_longer_customer_id(store) -> None:
    store.customers.add()
    store.customers.add(id="cust-10")
    operations = store.operations()
    renewal = datetime(2025, 7, 1, tzinfo=UTC)
    other = await operations.ensure_renewal_invoice_draft(
        ORG, "cust-10", amount="300", renewal_date=renewal
    )
    draft = await operations.ensure_renewal_invoice_draft(
        ORG, "cust-1", amount="900", renewal_date=renewal
    )
    assert draft.created is True
    assert draft.invoice_id != other.invoice_id


@pytest.mark.parametrize("budget", [None, Decimal("0"), Decimal("-10")])
async def test_create_project_invoice_requires_positive_budget(store, budget) -> None:
    customer = store.customers.add()
    project = store.projects.add(budget=budget)
    assert await store.operations().create_project_invoice(ORG, project, customer) is None
    assert store.invoices.invoices == []


async def test_renewal_draft_created_once_per_renewal_date(store) -> None:
    store.customers.add()
    operations = store.operations()
    renewal = datetime(2025, 7, 1, tzinfo=UTC)

    first = await operations.ensure_renewal_invoice_draft(
        ORG, "cust-1", amount="900", currency="eur", renewal_date=renewal,
        description="Support plan",
    )
    second = await operations.ensure_renewal_invoice_draft(
        ORG, "cust-1", amount="900", renewal_date=renewal
    )

    assert first.created is True
    assert first.currency == "EUR"
    assert second.created is False
    assert second.invoice_id == first.invoice_id
    notes = store.invoices.created[0].notes
    assert notes == f"Support plan\n{renewal_invoice_marker('cust-1', renewal)}"
    assert renewal_invoice_marker("cust-1", renewal) == "Renewal Ref: cust-1:2025-07-01"


async def test_renewal_draft_default_due_date(store) -> None:
    store.customers.add()
    draft = await store.operations().ensure_renewal_invoice_draft(ORG, "cust-1", amount=100)
    assert draft.due_date == datetime(2025, 3, 29, 9, 30, tzinfo=UTC)
    assert store.invoices.created[0].item_description == "Contract renewal"


async def test_renewal_draft_reuses_explicit_invoice(store) -> None:
    customer = store.customers.add()
    existing = await store.operations().create_project_invoice(
        ORG, store.projects.add(), customer
    )
    draft = await store.operations().ensure_renewal_invoice_draft(
        ORG, "cust-1", amount=100, existing_invoice_id=existing.invoice_id
    )
    assert draft.created is False
    assert draft.invoice_id == existing.invoice_id


async def test_renewal_draft_skipped_without_amount_or_email(store) -> None:
    store.customers.add(email=None)
    operations = store.operations()
    assert await operations.ensure_renewal_invoice_draft(ORG, "cust-1", amount=0) is None
    assert await operations.ensure_renewal_invoice_draft(ORG, "cust-1", amount=50) is None
    assert store.invoices.invoices == []


async def test_compute_operations_snapshot(store) -> None:
    snapshot = await store.operations().compute_operations_snapshot(ORG)
    assert snapshot.active_project_count == 4
    assert snapshot.projects_at_risk_count == 1
    assert snapshot.overdue_invoice_count == 2
    assert snapshot.active_client_count == 7
    assert snapshot.overdue_task_count == 0
