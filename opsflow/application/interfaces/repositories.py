"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
Every read and write is scoped by organization_id.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from opsflow.application.dtos.customer import CustomerResult
    from opsflow.application.dtos.invoice import InvoiceCreate, InvoiceResult
    from opsflow.application.dtos.project import ProjectCreate, ProjectResult, TaskCreate
    from opsflow.application.dtos.user import UserContact
    from opsflow.application.dtos.workflow import (
        WorkflowConfigResult,
        WorkflowRunCreate,
        WorkflowRunResult,
        WorkflowRunUpdate,
    )


# Customer repository interface
class ICustomerRepository(Protocol):
    """Protocol for CRM customer repository (DIP)."""

    async def get_by_id(
        self, organization_id: str, customer_id: str
    ) -> CustomerResult | None:
        """Return customer by ID if it belongs to the organization."""

    async def update_type_and_status(
        self,
        organization_id: str,
        customer_id: str,
        *,
        type: str,
        status: str | None,
    ) -> None:
        """Set customer type and pipeline status."""


# Project repository interface
class IProjectRepository(Protocol):
    """Protocol for project repository (DIP)."""

    async def get_by_id(
        self, organization_id: str, project_id: str
    ) -> ProjectResult | None:
        """Return project by ID if it belongs to the organization."""

    async def get_latest_for_customer(
        self, organization_id: str, customer_id: str
    ) -> ProjectResult | None:
        """Return the most recently created project for the customer."""

    async def create(self, organization_id: str, data: ProjectCreate) -> ProjectResult:
        """Create a project."""

    async def mark_completed(
        self, organization_id: str, project_id: str, end_date: datetime
    ) -> None:
        """Set status COMPLETED and stamp end_date."""


# Task repository interface
class ITaskRepository(Protocol):
    """Protocol for project task repository (DIP)."""

    async def count_by_project(self, organization_id: str, project_id: str) -> int:
        """Return number of tasks on the project."""

    async def create_many(self, organization_id: str, tasks: list[TaskCreate]) -> int:
        """Insert tasks; return the number inserted."""


# Project resource repository interface
class IProjectResourceRepository(Protocol):
    """Protocol for project resource (assignment) repository (DIP)."""

    async def upsert(
        self, project_id: str, assignee_id: str, *, role: str, allocation: int
    ) -> None:
        """Create the (project, assignee) assignment or touch the existing one."""


# Invoice repository interface
class IInvoiceRepository(Protocol):
    """Protocol for invoice repository (DIP)."""

    async def get_by_id(
        self, organization_id: str, invoice_id: str
    ) -> InvoiceResult | None:
        """Return invoice by ID if it belongs to the organization."""

    async def find_by_notes_marker(
        self, organization_id: str, marker: str
    ) -> InvoiceResult | None:
        """Return the first invoice whose notes carry marker as a whole line."""

    async def count_by_organization(self, organization_id: str) -> int:
        """Return total invoice count for the organization."""

    async def create(self, organization_id: str, data: InvoiceCreate) -> InvoiceResult:
        """Create an invoice with a single line item."""


# Organization repository interface
class IOrganizationRepository(Protocol):
    """Protocol for organization (tenant) repository (DIP)."""

    async def get_name(self, organization_id: str) -> str | None:
        """Return the organization's display name."""


# User repository interface
class IUserRepository(Protocol):
    """Protocol for user repository (DIP)."""

    async def get_contact(self, user_id: str) -> UserContact | None:
        """Return name and email for user."""


# Workflow config repository interface
class IWorkflowConfigRepository(Protocol):
    """Protocol for per-tenant prebuilt workflow config repository (DIP)."""

    async def list_by_organization(
        self, organization_id: str
    ) -> list[WorkflowConfigResult]:
        """Return all stored configs for the organization (one batched read)."""

    async def get(
        self, organization_id: str, workflow_key: str
    ) -> WorkflowConfigResult | None:
        """Return the stored config for one workflow key."""

    async def save(
        self,
        organization_id: str,
        workflow_key: str,
        *,
        enabled: bool,
        email_subject: str,
        email_body: str,
        template_version: int,
        updated_by_user_id: str | None,
    ) -> WorkflowConfigResult:
        """Insert or update the config for (organization, workflow key)."""

    async def list_enabled_organization_ids(self, workflow_key: str) -> list[str]:
        """Return IDs of organizations that enabled the workflow."""


# Workflow run repository interface
class IWorkflowRunRepository(Protocol):
    """Protocol for workflow run repository (DIP). Runs are never deleted."""

    async def create(self, data: WorkflowRunCreate) -> WorkflowRunResult:
        """Create a run in RUNNING status."""

    async def update(self, run_id: str, data: WorkflowRunUpdate) -> WorkflowRunResult:
        """Finalize a run. Raises InvalidRunTransitionException if already terminal."""

    async def list_runs(
        self,
        organization_id: str,
        workflow_key: str | None = None,
        limit: int = 50,
    ) -> list[WorkflowRunResult]:
        """Return runs for the organization, newest first."""


# Operations metrics repository interface
class IOperationsMetricsRepository(Protocol):
    """Protocol for read-only operational counts (each count is independent)."""

    async def count_active_projects(self, organization_id: str) -> int:
        """Projects in PLANNED or IN_PROGRESS."""

    async def count_projects_at_risk(self, organization_id: str, now: datetime) -> int:
        """IN_PROGRESS projects whose end date has passed."""

    async def count_overdue_invoices(self, organization_id: str, now: datetime) -> int:
        """SENT or OVERDUE invoices whose due date has passed."""

    async def count_active_clients(self, organization_id: str) -> int:
        """Customers of type CUSTOMER."""

    async def count_overdue_tasks(self, organization_id: str, now: datetime) -> int:
        """Tasks not DONE or ARCHIVED whose due date has passed."""
