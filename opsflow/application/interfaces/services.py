"""Service interfaces (ports) for the application layer.

Protocols define contracts for outbound services (DIP).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from opsflow.application.dtos.notification import EmailResult
    from opsflow.application.dtos.workflow import ExecutionSummary
    from opsflow.domain.entities.event import WorkflowEvent


# Email sender interface
class IEmailSender(Protocol):
    """Protocol for delivering one rendered email to one recipient."""

    async def send_email(self, to: str, subject: str, html_body: str) -> EmailResult:
        """Send the email. Transport failures are reported as success=False."""


# Workflow engine interface
class IWorkflowEngine(Protocol):
    """Protocol for dispatching an event to the prebuilt workflow handlers."""

    async def execute(self, event: WorkflowEvent) -> list[ExecutionSummary]:
        """Run every matched handler; return one summary per matched handler."""
