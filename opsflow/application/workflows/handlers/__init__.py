"""Prebuilt workflow handlers, in stable registry order."""

from opsflow.application.workflows.handlers.base import (
    ExecutionContext,
    WorkflowHandler,
    send_workflow_email,
)
from opsflow.application.workflows.handlers.client_onboarding import ClientOnboardingHandler
from opsflow.application.workflows.handlers.contract_renewal import ContractRenewalHandler
from opsflow.application.workflows.handlers.internal_health import InternalHealthHandler
from opsflow.application.workflows.handlers.invoice_tracking import InvoiceTrackingHandler
from opsflow.application.workflows.handlers.lead_to_client import LeadToClientHandler
from opsflow.application.workflows.handlers.project_lifecycle import ProjectLifecycleHandler

HANDLERS: tuple[WorkflowHandler, ...] = (
    LeadToClientHandler(),
    ClientOnboardingHandler(),
    ProjectLifecycleHandler(),
    InvoiceTrackingHandler(),
    ContractRenewalHandler(),
    InternalHealthHandler(),
)

__all__ = [
    "HANDLERS",
    "ClientOnboardingHandler",
    "ContractRenewalHandler",
    "ExecutionContext",
    "InternalHealthHandler",
    "InvoiceTrackingHandler",
    "LeadToClientHandler",
    "ProjectLifecycleHandler",
    "WorkflowHandler",
    "send_workflow_email",
]
