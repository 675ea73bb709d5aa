"""Idempotent domain side effects shared by the prebuilt workflow handlers.

Every ensure-style operation looks up an existing record by a stable business
key before creating one, so redelivered events and sibling handlers reacting
to the same business event never duplicate projects, tasks or invoices.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Any

from opsflow.application.dtos.customer import CustomerPromotionResult, CustomerResult
from opsflow.application.dtos.invoice import (
    InvoiceCreate,
    InvoiceDraftResult,
    InvoiceResult,
    OperationsSnapshot,
)
from opsflow.application.dtos.project import (
    ProjectCreate,
    ProjectProvisionResult,
    ProjectResult,
    TaskCreate,
)
from opsflow.application.interfaces.repositories import (
    ICustomerRepository,
    IInvoiceRepository,
    IOperationsMetricsRepository,
    IProjectRepository,
    IProjectResourceRepository,
    ITaskRepository,
)
from opsflow.application.services.formatting import resolve_customer_display_name
from opsflow.application.services.payload_extractors import extract_decimal, extract_string
from opsflow.domain.enums import (
    CustomerType,
    InvoiceStatus,
    LeadStatus,
    Priority,
    ProjectStatus,
    TaskStatus,
)
from opsflow.domain.exceptions import ResourceNotFoundException
from opsflow.shared.telemetry.logging import get_logger
from opsflow.shared.telemetry.tracing import traced
from opsflow.shared.utils.datetime import add_days, utc_now, year_month_prefix

logger = get_logger(__name__)

CLIENT_STATUSES = frozenset({LeadStatus.QUALIFIED.value, LeadStatus.CLOSED_WON.value})

# (title, priority, order, due in days)
ONBOARDING_TASKS: tuple[tuple[str, Priority, int, int], ...] = (
    ("Schedule kickoff call", Priority.HIGH, 1, 3),
    ("Collect onboarding documents", Priority.MEDIUM, 2, 5),
    ("Confirm billing preferences", Priority.MEDIUM, 3, 7),
)

PROJECT_INVOICE_DUE_DAYS = 30
RENEWAL_INVOICE_DUE_DAYS = 15
OWNER_ROLE = "Owner"
OWNER_ALLOCATION = 100


def project_invoice_marker(project_id: str) -> str:
    """Notes marker correlating an invoice with the project it bills."""
    return f"Project ID: {project_id}"


def renewal_invoice_marker(customer_id: str, renewal_date: datetime) -> str:
    """Notes marker correlating a renewal draft with (customer, renewal date)."""
    return f"Renewal Ref: {customer_id}:{renewal_date.strftime('%Y-%m-%d')}"


def _draft_result(invoice: InvoiceResult, created: bool) -> InvoiceDraftResult:
    return InvoiceDraftResult(
        invoice_id=invoice.id,
        invoice_number=invoice.invoice_number,
        created=created,
        amount=invoice.total_amount,
        due_date=invoice.due_date,
        status=invoice.status,
        currency=invoice.currency,
    )


class WorkflowOperations:
    """Read-modify-write operations against tenant domain records."""

    def __init__(
        self,
        *,
        customer_repo: ICustomerRepository,
        project_repo: IProjectRepository,
        task_repo: ITaskRepository,
        project_resource_repo: IProjectResourceRepository,
        invoice_repo: IInvoiceRepository,
        metrics_repo: IOperationsMetricsRepository,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.customer_repo = customer_repo
        self.project_repo = project_repo
        self.task_repo = task_repo
        self.project_resource_repo = project_resource_repo
        self.invoice_repo = invoice_repo
        self.metrics_repo = metrics_repo
        self._clock = clock

    async def get_customer(self, organization_id: str, customer_id: str) -> CustomerResult | None:
        return await self.customer_repo.get_by_id(organization_id, customer_id)

    async def get_project(self, organization_id: str, project_id: str) -> ProjectResult | None:
        return await self.project_repo.get_by_id(organization_id, project_id)

    async def complete_project(self, organization_id: str, project: ProjectResult) -> bool:
        """Stamp end_date and COMPLETED on a project that has no end date yet."""
        if project.end_date is not None:
            return False
        await self.project_repo.mark_completed(organization_id, project.id, self._clock())
        return True

    @traced("workflow_operations.promote_customer_to_client")
    async def promote_customer_to_client(
        self, organization_id: str, customer_id: str
    ) -> CustomerPromotionResult:
        """Make the customer a CUSTOMER with a client pipeline status.

        No write when the customer already is one. Raises
        ResourceNotFoundException when the customer is not in the tenant.
        """
        customer = await self.customer_repo.get_by_id(organization_id, customer_id)
        if customer is None:
            raise ResourceNotFoundException("customer", customer_id)
        if customer.type == CustomerType.CUSTOMER.value and customer.status in CLIENT_STATUSES:
            return CustomerPromotionResult(
                customer_id=customer_id, previous_type=customer.type, was_updated=False
            )
        status = customer.status if customer.status in CLIENT_STATUSES else LeadStatus.QUALIFIED.value
        await self.customer_repo.update_type_and_status(
            organization_id, customer_id, type=CustomerType.CUSTOMER.value, status=status
        )
        logger.info(
            "Promoted customer %s to client (organization_id=%s, previous_type=%s)",
            customer_id,
            organization_id,
            customer.type,
        )
        return CustomerPromotionResult(
            customer_id=customer_id, previous_type=customer.type, was_updated=True
        )

    @traced("workflow_operations.ensure_onboarding_project")
    async def ensure_onboarding_project(
        self,
        organization_id: str,
        customer_id: str,
        project_name: str,
        *,
        start_date: datetime | None = None,
        created_by_id: str | None = None,
        deal_value: Any = None,
        currency: str | None = None,
        description: str | None = None,
    ) -> ProjectProvisionResult:
        """Return the customer's latest project, or create one and seed its tasks."""
        existing = await self.project_repo.get_latest_for_customer(organization_id, customer_id)
        if existing is not None:
            return ProjectProvisionResult(project_id=existing.id, created=False)

        project = await self.project_repo.create(
            organization_id,
            ProjectCreate(
                customer_id=customer_id,
                name=project_name,
                status=ProjectStatus.IN_PROGRESS.value,
                start_date=start_date or self._clock(),
                created_by_id=created_by_id,
                budget=extract_decimal(deal_value),
                currency=(extract_string(currency) or "USD").upper(),
                description=description,
            ),
        )
        task_seed_count = await self.seed_onboarding_tasks(
            organization_id, project.id, owner_id=created_by_id
        )
        logger.info(
            "Created onboarding project %s for customer %s (organization_id=%s, tasks=%d)",
            project.id,
            customer_id,
            organization_id,
            task_seed_count,
        )
        return ProjectProvisionResult(
            project_id=project.id, created=True, task_seed_count=task_seed_count
        )

    async def seed_onboarding_tasks(
        self, organization_id: str, project_id: str, owner_id: str | None = None
    ) -> int:
        """Insert the onboarding task set unless the project has any task; return count inserted."""
        if await self.task_repo.count_by_project(organization_id, project_id) > 0:
            return 0
        now = self._clock()
        tasks = [
            TaskCreate(
                project_id=project_id,
                title=title,
                status=TaskStatus.TODO.value,
                priority=priority.value,
                order=order,
                due_date=add_days(now, due_in_days),
                created_by_id=owner_id,
                assigned_to_id=owner_id,
            )
            for title, priority, order, due_in_days in ONBOARDING_TASKS
        ]
        return await self.task_repo.create_many(organization_id, tasks)

    async def ensure_project_owner_resource(
        self, project_id: str, assignee_id: str | None
    ) -> bool:
        """Upsert the owner assignment; False when there is no assignee."""
        if not assignee_id:
            return False
        await self.project_resource_repo.upsert(
            project_id, assignee_id, role=OWNER_ROLE, allocation=OWNER_ALLOCATION
        )
        return True

    async def next_invoice_number(self, organization_id: str, issue_date: datetime) -> str:
        """Return INV-YYYYMM-<tenant invoice count + 1>."""
        count = await self.invoice_repo.count_by_organization(organization_id)
        return f"INV-{year_month_prefix(issue_date)}-{count + 1}"

    @traced("workflow_operations.create_project_invoice")
    async def create_project_invoice(
        self,
        organization_id: str,
        project: ProjectResult,
        customer: CustomerResult,
        *,
        created_by_id: str | None = None,
    ) -> InvoiceDraftResult | None:
        """Return the project's invoice, creating a DRAFT from the budget if none exists.

        Returns None when no invoice exists and the budget is missing or not positive.
        """
        marker = project_invoice_marker(project.id)
        existing = await self.invoice_repo.find_by_notes_marker(organization_id, marker)
        if existing is not None:
            return _draft_result(existing, created=False)

        if project.budget is None or project.budget <= 0:
            logger.info(
                "Skipping invoice for project %s: no positive budget (organization_id=%s)",
                project.id,
                organization_id,
            )
            return None

        issue_date = self._clock()
        invoice = await self.invoice_repo.create(
            organization_id,
            InvoiceCreate(
                invoice_number=await self.next_invoice_number(organization_id, issue_date),
                customer_id=customer.id,
                customer_name=resolve_customer_display_name(
                    customer.first_name, customer.last_name, customer.company
                )
                or "Client",
                customer_email=customer.email or "",
                customer_address=customer.address,
                customer_phone=customer.phone,
                status=InvoiceStatus.DRAFT.value,
                currency=project.currency or "USD",
                issue_date=issue_date,
                due_date=add_days(issue_date, PROJECT_INVOICE_DUE_DAYS),
                total_amount=project.budget,
                item_description=f"Project: {project.name}",
                notes=f"Invoice for project: {project.name}\n{marker}",
                created_by_id=created_by_id,
            ),
        )
        logger.info(
            "Created invoice %s for project %s (organization_id=%s)",
            invoice.invoice_number,
            project.id,
            organization_id,
        )
        return _draft_result(invoice, created=True)

    @traced("workflow_operations.ensure_renewal_invoice_draft")
    async def ensure_renewal_invoice_draft(
        self,
        organization_id: str,
        customer_id: str,
        *,
        amount: Any = None,
        currency: str | None = None,
        due_date: datetime | None = None,
        renewal_date: datetime | None = None,
        description: str | None = None,
        created_by_id: str | None = None,
        existing_invoice_id: str | None = None,
    ) -> InvoiceDraftResult | None:
        """Return the renewal draft for (customer, renewal date), creating it when possible.

        Lookup order: explicit invoice id, then the renewal marker in notes.
        Returns None when nothing exists and either the amount is not positive
        or the customer has no email address.
        """
        if existing_invoice_id:
            existing = await self.invoice_repo.get_by_id(organization_id, existing_invoice_id)
            if existing is not None:
                return _draft_result(existing, created=False)

        marker = renewal_invoice_marker(customer_id, renewal_date) if renewal_date else None
        if marker:
            existing = await self.invoice_repo.find_by_notes_marker(organization_id, marker)
            if existing is not None:
                return _draft_result(existing, created=False)

        total_amount = extract_decimal(amount)
        if total_amount is None or total_amount <= Decimal(0):
            return None

        customer = await self.customer_repo.get_by_id(organization_id, customer_id)
        if customer is None or not extract_string(customer.email):
            return None

        issue_date = self._clock()
        line_description = extract_string(description) or "Contract renewal"
        notes_lines = [line for line in (extract_string(description), marker) if line]
        invoice = await self.invoice_repo.create(
            organization_id,
            InvoiceCreate(
                invoice_number=await self.next_invoice_number(organization_id, issue_date),
                customer_id=customer_id,
                customer_name=resolve_customer_display_name(
                    customer.first_name, customer.last_name, customer.company
                )
                or "Client",
                customer_email=customer.email or "",
                customer_address=customer.address,
                customer_phone=customer.phone,
                status=InvoiceStatus.DRAFT.value,
                currency=(extract_string(currency) or "USD").upper(),
                issue_date=issue_date,
                due_date=due_date or add_days(issue_date, RENEWAL_INVOICE_DUE_DAYS),
                total_amount=total_amount,
                item_description=line_description,
                notes="\n".join(notes_lines) or None,
                created_by_id=created_by_id,
            ),
        )
        logger.info(
            "Created renewal draft %s for customer %s (organization_id=%s)",
            invoice.invoice_number,
            customer_id,
            organization_id,
        )
        return _draft_result(invoice, created=True)

    @traced("workflow_operations.compute_operations_snapshot")
    async def compute_operations_snapshot(self, organization_id: str) -> OperationsSnapshot:
        """Run the five operational counts concurrently."""
        now = self._clock()
        (
            active_projects,
            projects_at_risk,
            overdue_invoices,
            active_clients,
            overdue_tasks,
        ) = await asyncio.gather(
            self.metrics_repo.count_active_projects(organization_id),
            self.metrics_repo.count_projects_at_risk(organization_id, now),
            self.metrics_repo.count_overdue_invoices(organization_id, now),
            self.metrics_repo.count_active_clients(organization_id),
            self.metrics_repo.count_overdue_tasks(organization_id, now),
        )
        return OperationsSnapshot(
            active_project_count=active_projects,
            projects_at_risk_count=projects_at_risk,
            overdue_invoice_count=overdue_invoices,
            active_client_count=active_clients,
            overdue_task_count=overdue_tasks,
        )
