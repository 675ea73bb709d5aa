"""Pytest configuration and fixtures for opsflow.

Unit tests run against in-memory fakes implementing the repository and
sender Protocols. Integration tests use opsflow.infrastructure.persistence.database
and skip when Postgres is not configured.
"""

from __future__ import annotations

import dataclasses
import itertools
from collections.abc import AsyncIterator, Iterator
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

import opsflow.infrastructure.persistence.database as database
import opsflow.infrastructure.persistence.models  # noqa: F401
from opsflow.application.dtos.customer import CustomerResult
from opsflow.application.dtos.invoice import InvoiceCreate, InvoiceResult
from opsflow.application.dtos.notification import EmailResult
from opsflow.application.dtos.project import ProjectCreate, ProjectResult, TaskCreate
from opsflow.application.dtos.user import UserContact
from opsflow.application.dtos.workflow import (
    WorkflowConfigResult,
    WorkflowRunCreate,
    WorkflowRunResult,
    WorkflowRunUpdate,
)
from opsflow.application.services.workflow_config_service import resolve_workflow_config
from opsflow.application.services.workflow_operations import WorkflowOperations
from opsflow.application.workflows.definitions import get_workflow_definition
from opsflow.application.workflows.handlers.base import ExecutionContext
from opsflow.core.config import get_settings
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.enums import CustomerType, ProjectStatus
from opsflow.domain.exceptions import (
    InvalidRunTransitionException,
    ResourceNotFoundException,
)
from opsflow.infrastructure.services.workflow_engine import WorkflowEngine
from opsflow.shared.enums import WorkflowRunStatus

ORG_ID = "org-1"
NOW = datetime(2025, 3, 14, 9, 30, tzinfo=UTC)


def fixed_clock() -> datetime:
    return NOW


class FakeCustomerRepository:
    def __init__(self) -> None:
        self.customers: dict[str, CustomerResult] = {}
        self.update_calls = 0

    def add(self, **fields: Any) -> CustomerResult:
        values: dict[str, Any] = {
            "id": "cust-1",
            "organization_id": ORG_ID,
            "type": CustomerType.LEAD.value,
            "status": "NEW",
            "first_name": "Ada",
            "last_name": "Lovelace",
            "company": "Analytical Engines",
            "email": "ada@example.com",
        }
        values.update(fields)
        customer = CustomerResult(**values)
        self.customers[customer.id] = customer
        return customer

    async def get_by_id(self, organization_id: str, customer_id: str) -> CustomerResult | None:
        customer = self.customers.get(customer_id)
        if customer is None or customer.organization_id != organization_id:
            return None
        return customer

    async def update_type_and_status(
        self, organization_id: str, customer_id: str, *, type: str, status: str | None
    ) -> None:
        customer = await self.get_by_id(organization_id, customer_id)
        if customer is None:
            raise ResourceNotFoundException("customer", customer_id)
        self.update_calls += 1
        self.customers[customer_id] = dataclasses.replace(customer, type=type, status=status)


class FakeProjectRepository:
    def __init__(self) -> None:
        self.projects: dict[str, ProjectResult] = {}
        self._ids = itertools.count(1)

    def add(self, **fields: Any) -> ProjectResult:
        values: dict[str, Any] = {
            "id": "p1",
            "organization_id": ORG_ID,
            "customer_id": "cust-1",
            "name": "Website Redesign",
            "status": ProjectStatus.IN_PROGRESS.value,
            "start_date": None,
            "end_date": None,
            "budget": Decimal("5000"),
            "currency": "USD",
            "created_by_id": "user-1",
        }
        values.update(fields)
        project = ProjectResult(**values)
        self.projects[project.id] = project
        return project

    async def get_by_id(self, organization_id: str, project_id: str) -> ProjectResult | None:
        project = self.projects.get(project_id)
        if project is None or project.organization_id != organization_id:
            return None
        return project

    async def get_latest_for_customer(
        self, organization_id: str, customer_id: str
    ) -> ProjectResult | None:
        matches = [
            p
            for p in self.projects.values()
            if p.organization_id == organization_id and p.customer_id == customer_id
        ]
        return matches[-1] if matches else None

    async def create(self, organization_id: str, data: ProjectCreate) -> ProjectResult:
        project = ProjectResult(
            id=f"project-{next(self._ids)}",
            organization_id=organization_id,
            customer_id=data.customer_id,
            name=data.name,
            status=data.status,
            start_date=data.start_date,
            end_date=None,
            budget=data.budget,
            currency=data.currency,
            created_by_id=data.created_by_id,
            description=data.description,
            created_at=NOW,
        )
        self.projects[project.id] = project
        return project

    async def mark_completed(
        self, organization_id: str, project_id: str, end_date: datetime
    ) -> None:
        project = await self.get_by_id(organization_id, project_id)
        if project is None:
            raise ResourceNotFoundException("project", project_id)
        self.projects[project_id] = dataclasses.replace(
            project, status=ProjectStatus.COMPLETED.value, end_date=end_date
        )


class FakeTaskRepository:
    def __init__(self) -> None:
        self.tasks: list[tuple[str, TaskCreate]] = []

    async def count_by_project(self, organization_id: str, project_id: str) -> int:
        return sum(
            1 for org, t in self.tasks if org == organization_id and t.project_id == project_id
        )

    async def create_many(self, organization_id: str, tasks: list[TaskCreate]) -> int:
        self.tasks.extend((organization_id, t) for t in tasks)
        return len(tasks)


class FakeProjectResourceRepository:
    def __init__(self) -> None:
        self.resources: dict[tuple[str, str], tuple[str, int]] = {}

    async def upsert(
        self, project_id: str, assignee_id: str, *, role: str, allocation: int
    ) -> None:
        self.resources.setdefault((project_id, assignee_id), (role, allocation))


class FakeInvoiceRepository:
    def __init__(self) -> None:
        self.invoices: list[InvoiceResult] = []
        self.created: list[InvoiceCreate] = []
        self._ids = itertools.count(1)

    async def get_by_id(self, organization_id: str, invoice_id: str) -> InvoiceResult | None:
        for invoice in self.invoices:
            if invoice.id == invoice_id and invoice.organization_id == organization_id:
                return invoice
        return None

    async def find_by_notes_marker(
        self, organization_id: str, marker: str
    ) -> InvoiceResult | None:
        for invoice in self.invoices:
            lines = (invoice.notes or "").splitlines()
            if invoice.organization_id == organization_id and marker in lines:
                return invoice
        return None

    async def count_by_organization(self, organization_id: str) -> int:
        return sum(1 for i in self.invoices if i.organization_id == organization_id)

    async def create(self, organization_id: str, data: InvoiceCreate) -> InvoiceResult:
        invoice = InvoiceResult(
            id=f"inv-{next(self._ids)}",
            organization_id=organization_id,
            invoice_number=data.invoice_number,
            total_amount=data.total_amount,
            due_date=data.due_date,
            status=data.status,
            currency=data.currency,
            customer_id=data.customer_id,
            notes=data.notes,
        )
        self.invoices.append(invoice)
        self.created.append(data)
        return invoice


class FakeOrganizationRepository:
    def __init__(self) -> None:
        self.names: dict[str, str] = {ORG_ID: "Acme Studio"}
        self.calls = 0

    async def get_name(self, organization_id: str) -> str | None:
        self.calls += 1
        return self.names.get(organization_id)


class FakeUserRepository:
    def __init__(self) -> None:
        self.contacts: dict[str, UserContact] = {
            "user-1": UserContact(id="user-1", name="Grace Hopper", email="grace@acme.test")
        }
        self.calls = 0

    async def get_contact(self, user_id: str) -> UserContact | None:
        self.calls += 1
        return self.contacts.get(user_id)


class FakeWorkflowConfigRepository:
    def __init__(self) -> None:
        self.configs: dict[tuple[str, str], WorkflowConfigResult] = {}
        self.list_calls = 0
        self._ids = itertools.count(1)

    def enable(self, workflow_key: str, organization_id: str = ORG_ID, **fields: Any) -> None:
        definition = get_workflow_definition(workflow_key)
        values: dict[str, Any] = {
            "id": f"cfg-{next(self._ids)}",
            "organization_id": organization_id,
            "workflow_key": workflow_key,
            "enabled": True,
            "email_subject": definition.email_defaults.subject,
            "email_body": definition.email_defaults.body,
            "template_version": 1,
            "updated_by_user_id": None,
        }
        values.update(fields)
        self.configs[(organization_id, workflow_key)] = WorkflowConfigResult(**values)

    async def list_by_organization(self, organization_id: str) -> list[WorkflowConfigResult]:
        self.list_calls += 1
        return [c for (org, _), c in self.configs.items() if org == organization_id]

    async def get(self, organization_id: str, workflow_key: str) -> WorkflowConfigResult | None:
        return self.configs.get((organization_id, workflow_key))

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
        existing = self.configs.get((organization_id, workflow_key))
        config = WorkflowConfigResult(
            id=existing.id if existing else f"cfg-{next(self._ids)}",
            organization_id=organization_id,
            workflow_key=workflow_key,
            enabled=enabled,
            email_subject=email_subject,
            email_body=email_body,
            template_version=template_version,
            updated_by_user_id=updated_by_user_id,
        )
        self.configs[(organization_id, workflow_key)] = config
        return config

    async def list_enabled_organization_ids(self, workflow_key: str) -> list[str]:
        return sorted(
            org for (org, key), c in self.configs.items() if key == workflow_key and c.enabled
        )


class FakeWorkflowRunRepository:
    def __init__(self) -> None:
        self.runs: dict[str, WorkflowRunResult] = {}
        self._ids = itertools.count(1)
        self.fail_create = False

    async def create(self, data: WorkflowRunCreate) -> WorkflowRunResult:
        if self.fail_create:
            raise RuntimeError("run table unavailable")
        run = WorkflowRunResult(
            id=f"run-{next(self._ids)}",
            organization_id=data.organization_id,
            workflow_key=data.workflow_key,
            status=WorkflowRunStatus.RUNNING.value,
            trigger_module=data.trigger_module,
            trigger_entity=data.trigger_entity,
            trigger_event=data.trigger_event,
            triggered_at=data.triggered_at,
            started_at=data.started_at,
            context=data.context,
        )
        self.runs[run.id] = run
        return run

    async def update(self, run_id: str, data: WorkflowRunUpdate) -> WorkflowRunResult:
        run = self.runs.get(run_id)
        if run is None:
            raise ResourceNotFoundException("workflow_run", run_id)
        if WorkflowRunStatus(run.status).is_terminal:
            raise InvalidRunTransitionException(run_id, run.status, data.status)
        updated = dataclasses.replace(
            run,
            status=data.status,
            completed_at=data.completed_at,
            duration_ms=data.duration_ms,
            email_recipient=data.email_recipient,
            email_subject=data.email_subject,
            result=data.result,
            error=data.error,
        )
        self.runs[run_id] = updated
        return updated

    async def list_runs(
        self, organization_id: str, workflow_key: str | None = None, limit: int = 50
    ) -> list[WorkflowRunResult]:
        runs = [
            r
            for r in reversed(list(self.runs.values()))
            if r.organization_id == organization_id
            and (workflow_key is None or r.workflow_key == workflow_key)
        ]
        return runs[:limit]


class FakeOperationsMetricsRepository:
    def __init__(self) -> None:
        self.counts = {
            "active_projects": 4,
            "projects_at_risk": 1,
            "overdue_invoices": 2,
            "active_clients": 7,
            "overdue_tasks": 0,
        }

    async def count_active_projects(self, organization_id: str) -> int:
        return self.counts["active_projects"]

    async def count_projects_at_risk(self, organization_id: str, now: datetime) -> int:
        return self.counts["projects_at_risk"]

    async def count_overdue_invoices(self, organization_id: str, now: datetime) -> int:
        return self.counts["overdue_invoices"]

    async def count_active_clients(self, organization_id: str) -> int:
        return self.counts["active_clients"]

    async def count_overdue_tasks(self, organization_id: str, now: datetime) -> int:
        return self.counts["overdue_tasks"]


class RecordingEmailSender:
    """IEmailSender that records sends; set fail_with to simulate a transport failure."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail_with: str | None = None

    async def send_email(self, to: str, subject: str, html_body: str) -> EmailResult:
        self.sent.append((to, subject, html_body))
        if self.fail_with is not None:
            return EmailResult(success=False, error=self.fail_with)
        return EmailResult(success=True, message_id=f"msg-{len(self.sent)}")


@dataclasses.dataclass
class FakeStore:
    """All in-memory repositories for one test, plus builders for operations and engine."""

    customers: FakeCustomerRepository = dataclasses.field(default_factory=FakeCustomerRepository)
    projects: FakeProjectRepository = dataclasses.field(default_factory=FakeProjectRepository)
    tasks: FakeTaskRepository = dataclasses.field(default_factory=FakeTaskRepository)
    resources: FakeProjectResourceRepository = dataclasses.field(
        default_factory=FakeProjectResourceRepository
    )
    invoices: FakeInvoiceRepository = dataclasses.field(default_factory=FakeInvoiceRepository)
    organizations: FakeOrganizationRepository = dataclasses.field(
        default_factory=FakeOrganizationRepository
    )
    users: FakeUserRepository = dataclasses.field(default_factory=FakeUserRepository)
    configs: FakeWorkflowConfigRepository = dataclasses.field(
        default_factory=FakeWorkflowConfigRepository
    )
    runs: FakeWorkflowRunRepository = dataclasses.field(default_factory=FakeWorkflowRunRepository)
    metrics: FakeOperationsMetricsRepository = dataclasses.field(
        default_factory=FakeOperationsMetricsRepository
    )
    sender: RecordingEmailSender = dataclasses.field(default_factory=RecordingEmailSender)

    def operations(self) -> WorkflowOperations:
        return WorkflowOperations(
            customer_repo=self.customers,
            project_repo=self.projects,
            task_repo=self.tasks,
            project_resource_repo=self.resources,
            invoice_repo=self.invoices,
            metrics_repo=self.metrics,
            clock=fixed_clock,
        )

    def context(
        self, event: WorkflowEvent, workflow_key: str, **kwargs: Any
    ) -> ExecutionContext:
        """Execution context with default templates, as the engine would build it."""
        definition = get_workflow_definition(workflow_key)
        kwargs.setdefault("organization_name", "Acme Studio")
        kwargs.setdefault("app_url", "https://app.test")
        kwargs.setdefault("clock", fixed_clock)
        return ExecutionContext(
            event=event,
            definition=definition,
            config=resolve_workflow_config(definition, None),
            operations=self.operations(),
            email_sender=self.sender,
            **kwargs,
        )

    def engine(self, **kwargs: Any) -> WorkflowEngine:
        kwargs.setdefault("clock", fixed_clock)
        return WorkflowEngine(
            config_repo=self.configs,
            run_repo=self.runs,
            organization_repo=self.organizations,
            user_repo=self.users,
            operations=self.operations(),
            email_sender=self.sender,
            app_url="https://app.test",
            **kwargs,
        )


@pytest.fixture
def store() -> FakeStore:
    """Fresh in-memory store per test."""
    return FakeStore()


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
async def db_session() -> AsyncIterator[AsyncSession]:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_URL pointing at a Postgres database; tables are created
    inside the test transaction when missing. Skips (pytest.skip) when
    Postgres is not configured. Use
    @pytest.mark.requires_db; run without DB via: pytest -m 'not requires_db'.
    """
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_URL")
    async with database.AsyncSessionLocal() as session:
        conn = await session.connection()
        await conn.run_sync(database.Base.metadata.create_all)
        yield session
        await session.rollback()
    await database.dispose_engine()
