"""Application interfaces (ports): repository and service Protocols."""

from opsflow.application.interfaces.repositories import (
    ICustomerRepository,
    IInvoiceRepository,
    IOperationsMetricsRepository,
    IOrganizationRepository,
    IProjectRepository,
    IProjectResourceRepository,
    ITaskRepository,
    IUserRepository,
    IWorkflowConfigRepository,
    IWorkflowRunRepository,
)
from opsflow.application.interfaces.services import IEmailSender, IWorkflowEngine

__all__ = [
    "ICustomerRepository",
    "IEmailSender",
    "IInvoiceRepository",
    "IOperationsMetricsRepository",
    "IOrganizationRepository",
    "IProjectRepository",
    "IProjectResourceRepository",
    "ITaskRepository",
    "IUserRepository",
    "IWorkflowConfigRepository",
    "IWorkflowEngine",
    "IWorkflowRunRepository",
]
