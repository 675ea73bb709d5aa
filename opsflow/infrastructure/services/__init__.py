"""Infrastructure implementations of application service interfaces."""

from opsflow.infrastructure.services.workflow_engine import WorkflowEngine
from opsflow.infrastructure.services.workflow_notification_service import (
    LogOnlyEmailSender,
    ResendEmailSender,
    create_email_sender,
)

__all__ = [
    "LogOnlyEmailSender",
    "ResendEmailSender",
    "WorkflowEngine",
    "create_email_sender",
]
