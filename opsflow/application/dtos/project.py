"""DTOs for projects, project tasks and provisioning results."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class ProjectResult:
    """Project read-model."""

    id: str
    organization_id: str
    customer_id: str | None
    name: str
    status: str
    start_date: datetime | None
    end_date: datetime | None
    budget: Decimal | None
    currency: str
    created_by_id: str | None
    description: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class ProjectCreate:
    """Data for creating a project."""

    name: str
    status: str
    customer_id: str | None = None
    start_date: datetime | None = None
    created_by_id: str | None = None
    budget: Decimal | None = None
    currency: str = "USD"
    description: str | None = None


@dataclass(frozen=True)
class ProjectProvisionResult:
    """Outcome of ensuring an onboarding project exists for a customer."""

    project_id: str
    created: bool
    task_seed_count: int | None = None


@dataclass(frozen=True)
class TaskCreate:
    """Data for creating one project task."""

    project_id: str
    title: str
    status: str
    priority: str
    order: int
    due_date: datetime | None = None
    created_by_id: str | None = None
    assigned_to_id: str | None = None
