"""Handler contract and the execution context the dispatcher hands to handlers."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from opsflow.application.dtos.notification import EmailResult
from opsflow.application.dtos.user import UserContact
from opsflow.application.dtos.workflow import HandlerResult
from opsflow.application.interfaces.services import IEmailSender
from opsflow.application.services.template_renderer import (
    RenderedEmail,
    WorkflowTemplateRenderer,
)
from opsflow.application.services.workflow_operations import WorkflowOperations
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.entities.workflow import ResolvedWorkflowConfig, WorkflowDefinition
from opsflow.domain.exceptions import NotificationDeliveryException
from opsflow.shared.enums import WorkflowKey
from opsflow.shared.utils.datetime import utc_now

DEFAULT_APP_URL = "https://app.opsflow.local"


@dataclass(frozen=True)
class ExecutionContext:
    """Everything one handler execution may use; shared lookups are resolved once per event."""

    event: WorkflowEvent
    definition: WorkflowDefinition
    config: ResolvedWorkflowConfig
    operations: WorkflowOperations
    email_sender: IEmailSender
    organization_name: str
    triggering_user: UserContact | None = None
    app_url: str = DEFAULT_APP_URL
    renderer: WorkflowTemplateRenderer = field(default_factory=WorkflowTemplateRenderer)
    clock: Callable[[], datetime] = utc_now

    @property
    def organization_id(self) -> str:
        return self.event.organization_id

    @property
    def payload(self) -> dict[str, Any]:
        return self.event.payload

    @property
    def triggering_user_name(self) -> str | None:
        return self.triggering_user.name if self.triggering_user else None

    @property
    def triggering_user_email(self) -> str | None:
        return self.triggering_user.email if self.triggering_user else None

    def link(self, path: str) -> str:
        """Absolute app URL for path (e.g. '/projects/p1')."""
        return f"{self.app_url.rstrip('/')}{path}"


class WorkflowHandler(Protocol):
    """A stateless business process: a pure match predicate plus an execute routine."""

    key: WorkflowKey

    def matches(self, event: WorkflowEvent) -> bool:
        """Return True when the event should trigger this workflow."""

    async def execute(self, context: ExecutionContext) -> HandlerResult:
        """Perform side effects and notify; raise on failure."""


async def send_workflow_email(
    context: ExecutionContext,
    recipient: str,
    variables: Mapping[str, Any],
    failure_message: str,
) -> tuple[RenderedEmail, EmailResult]:
    """Render the tenant's templates and send them to recipient.

    Raises NotificationDeliveryException when the transport reports failure.
    """
    rendered = context.renderer.render(
        context.config.email_subject, context.config.email_body, variables
    )
    result = await context.email_sender.send_email(
        recipient, rendered.subject, rendered.html_body
    )
    if not result.success:
        raise NotificationDeliveryException(recipient, result.error or failure_message)
    return rendered, result


def skipped_notification(
    context: ExecutionContext, reason: str, **details: Any
) -> HandlerResult:
    """Result for a run that completed without sending an email."""
    return HandlerResult(
        details={
            "workflow": context.definition.key.value,
            **details,
            "skippedNotification": True,
            "reason": reason,
        }
    )
