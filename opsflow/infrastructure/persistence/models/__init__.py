"""Persistence models: ORM entities and mixins."""

from opsflow.infrastructure.persistence.models.customer import Customer
from opsflow.infrastructure.persistence.models.invoice import Invoice, InvoiceItem
from opsflow.infrastructure.persistence.models.mixins import (
    CuidMixin,
    MultiTenantModel,
    OrganizationMixin,
    TimestampMixin,
)
from opsflow.infrastructure.persistence.models.organization import Organization, User
from opsflow.infrastructure.persistence.models.project import Project, ProjectResource, Task
from opsflow.infrastructure.persistence.models.workflow import (
    PrebuiltWorkflowConfig,
    PrebuiltWorkflowRun,
)

__all__ = [
    "CuidMixin",
    "Customer",
    "Invoice",
    "InvoiceItem",
    "MultiTenantModel",
    "Organization",
    "OrganizationMixin",
    "PrebuiltWorkflowConfig",
    "PrebuiltWorkflowRun",
    "Project",
    "ProjectResource",
    "Task",
    "TimestampMixin",
    "User",
]
