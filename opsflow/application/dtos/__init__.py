"""Application DTOs (no ORM dependency)."""

from opsflow.application.dtos.customer import CustomerPromotionResult, CustomerResult
from opsflow.application.dtos.invoice import (
    InvoiceCreate,
    InvoiceDraftResult,
    InvoiceResult,
    OperationsSnapshot,
)
from opsflow.application.dtos.notification import EmailResult
from opsflow.application.dtos.project import (
    ProjectCreate,
    ProjectProvisionResult,
    ProjectResult,
    TaskCreate,
)
from opsflow.application.dtos.user import UserContact
from opsflow.application.dtos.workflow import (
    ExecutionSummary,
    HandlerResult,
    WorkflowConfigResult,
    WorkflowOverview,
    WorkflowRunCreate,
    WorkflowRunResult,
    WorkflowRunUpdate,
)

__all__ = [
    "CustomerPromotionResult",
    "CustomerResult",
    "EmailResult",
    "ExecutionSummary",
    "HandlerResult",
    "InvoiceCreate",
    "InvoiceDraftResult",
    "InvoiceResult",
    "OperationsSnapshot",
    "ProjectCreate",
    "ProjectProvisionResult",
    "ProjectResult",
    "TaskCreate",
    "UserContact",
    "WorkflowConfigResult",
    "WorkflowOverview",
    "WorkflowRunCreate",
    "WorkflowRunResult",
    "WorkflowRunUpdate",
]
