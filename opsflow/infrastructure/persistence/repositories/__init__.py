"""Persistence repositories: SQLAlchemy implementations of the application ports."""

from opsflow.infrastructure.persistence.repositories.base import BaseRepository
from opsflow.infrastructure.persistence.repositories.customer_repo import CustomerRepository
from opsflow.infrastructure.persistence.repositories.invoice_repo import InvoiceRepository
from opsflow.infrastructure.persistence.repositories.metrics_repo import (
    OperationsMetricsRepository,
)
from opsflow.infrastructure.persistence.repositories.organization_repo import (
    OrganizationRepository,
    UserRepository,
)
from opsflow.infrastructure.persistence.repositories.project_repo import (
    ProjectRepository,
    ProjectResourceRepository,
    TaskRepository,
)
from opsflow.infrastructure.persistence.repositories.workflow_repo import (
    WorkflowConfigRepository,
    WorkflowRunRepository,
)

__all__ = [
    "BaseRepository",
    "CustomerRepository",
    "InvoiceRepository",
    "OperationsMetricsRepository",
    "OrganizationRepository",
    "ProjectRepository",
    "ProjectResourceRepository",
    "TaskRepository",
    "UserRepository",
    "WorkflowConfigRepository",
    "WorkflowRunRepository",
]
