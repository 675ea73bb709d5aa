"""Workflow engine: dispatch an event to the prebuilt handlers (implements IWorkflowEngine)."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable, Sequence
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Any

from opsflow.application.dtos.user import UserContact
from opsflow.application.dtos.workflow import (
    ExecutionSummary,
    HandlerResult,
    WorkflowConfigResult,
    WorkflowRunCreate,
    WorkflowRunUpdate,
)
from opsflow.application.interfaces.repositories import (
    IOrganizationRepository,
    IUserRepository,
    IWorkflowConfigRepository,
    IWorkflowRunRepository,
)
from opsflow.application.interfaces.services import IEmailSender
from opsflow.application.services.template_renderer import WorkflowTemplateRenderer
from opsflow.application.services.workflow_config_service import resolve_workflow_config
from opsflow.application.services.workflow_operations import WorkflowOperations
from opsflow.application.workflows.definitions import find_workflow_definition
from opsflow.application.workflows.handlers import HANDLERS
from opsflow.application.workflows.handlers.base import (
    DEFAULT_APP_URL,
    ExecutionContext,
    WorkflowHandler,
)
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.exceptions import WorkflowTimeoutException
from opsflow.shared.enums import WorkflowRunStatus
from opsflow.shared.telemetry.logging import get_logger
from opsflow.shared.telemetry.tracing import add_span_attributes, add_span_event, traced
from opsflow.shared.utils.datetime import utc_now
from opsflow.shared.utils.serialization import to_json_compatible

logger = get_logger(__name__)

DEFAULT_ORGANIZATION_NAME = "Your organization"
WORKFLOW_DISABLED = "Workflow disabled"
DEFINITION_NOT_FOUND = "Workflow definition not found"

IsolationFactory = Callable[[], AbstractAsyncContextManager[Any]]


def _duration_ms(started_at: datetime, completed_at: datetime) -> int:
    return max(0, int((completed_at - started_at).total_seconds() * 1000))


def _run_result(result: HandlerResult) -> dict[str, Any]:
    details = dict(result.details)
    if result.email is not None and result.email.message_id:
        details.setdefault("messageId", result.email.message_id)
    return to_json_compatible(details)


class WorkflowEngine:
    """Matches an event against the handler registry and records one run per executed handler.

    Handlers run sequentially in registry order. Each execution is wrapped in
    the isolation scope (a SAVEPOINT in production) and the per-handler
    deadline; run records are written outside the isolation scope so a failed
    handler's run is still finalized.
    """

    def __init__(
        self,
        handlers: Sequence[WorkflowHandler] = HANDLERS,
        *,
        config_repo: IWorkflowConfigRepository,
        run_repo: IWorkflowRunRepository,
        organization_repo: IOrganizationRepository,
        user_repo: IUserRepository,
        operations: WorkflowOperations,
        email_sender: IEmailSender,
        app_url: str = DEFAULT_APP_URL,
        handler_timeout_seconds: float | None = None,
        isolation_factory: IsolationFactory | None = None,
        clock: Callable[[], datetime] = utc_now,
        renderer: WorkflowTemplateRenderer | None = None,
    ) -> None:
        self.handlers = tuple(handlers)
        self.config_repo = config_repo
        self.run_repo = run_repo
        self.organization_repo = organization_repo
        self.user_repo = user_repo
        self.operations = operations
        self.email_sender = email_sender
        self.app_url = app_url
        self.handler_timeout_seconds = handler_timeout_seconds
        self._isolation_factory = isolation_factory or contextlib.nullcontext
        self._clock = clock
        self._renderer = renderer or WorkflowTemplateRenderer()

    @traced("workflow_engine.execute")
    async def execute(self, event: WorkflowEvent) -> list[ExecutionSummary]:
        """Run every matched handler; return one summary per matched handler in registry order.

        Returns [] without any I/O when nothing matches. Only the tenant config
        batch load may raise; every per-handler failure lands in its summary.
        """
        matched = [h for h in self.handlers if h.matches(event)]
        if not matched:
            return []
        add_span_attributes(
            organization_id=event.organization_id, matched_handlers=len(matched)
        )

        configs = await self.config_repo.list_by_organization(event.organization_id)
        stored_by_key: dict[str, WorkflowConfigResult] = {
            c.workflow_key: c for c in configs
        }
        organization_name = (
            await self.organization_repo.get_name(event.organization_id)
            or DEFAULT_ORGANIZATION_NAME
        )
        triggering_user: UserContact | None = None
        if event.user_id:
            triggering_user = await self.user_repo.get_contact(event.user_id)

        summaries: list[ExecutionSummary] = []
        for handler in matched:
            summaries.append(
                await self._run_handler(
                    handler,
                    event,
                    stored_by_key.get(handler.key.value),
                    organization_name,
                    triggering_user,
                )
            )
        return summaries

    async def _run_handler(
        self,
        handler: WorkflowHandler,
        event: WorkflowEvent,
        stored: WorkflowConfigResult | None,
        organization_name: str,
        triggering_user: UserContact | None,
    ) -> ExecutionSummary:
        workflow_key = handler.key.value
        log_extra: dict[str, Any] = {
            "workflow_key": workflow_key,
            "organization_id": event.organization_id,
        }
        self._observe("workflow.matched", "Workflow %s matched event", log_extra)

        definition = find_workflow_definition(workflow_key)
        if definition is None:
            self._observe(
                "workflow.skipped",
                "Workflow %s skipped: definition not found",
                {**log_extra, "error": DEFINITION_NOT_FOUND},
            )
            return ExecutionSummary(
                workflow_key=workflow_key,
                matched=True,
                executed=False,
                success=False,
                error=DEFINITION_NOT_FOUND,
            )

        config = resolve_workflow_config(definition, stored)
        if not config.enabled:
            self._observe(
                "workflow.skipped",
                "Workflow %s skipped: disabled",
                {**log_extra, "error": WORKFLOW_DISABLED},
            )
            return ExecutionSummary(
                workflow_key=workflow_key,
                matched=True,
                executed=False,
                success=False,
                error=WORKFLOW_DISABLED,
            )

        started_at = self._clock()
        try:
            run = await self.run_repo.create(
                WorkflowRunCreate(
                    organization_id=event.organization_id,
                    workflow_key=workflow_key,
                    trigger_module=event.module,
                    trigger_entity=event.entity_type,
                    trigger_event=event.event_type,
                    triggered_at=event.triggered_at or started_at,
                    started_at=started_at,
                    context={
                        "organizationName": organization_name,
                        "payload": event.payload,
                        "userId": event.user_id,
                    },
                )
            )
        except Exception as e:
            logger.exception(
                "Workflow %s: could not create run record",
                workflow_key,
                extra={**log_extra, "error": str(e)},
            )
            add_span_event("workflow.failed", {**log_extra, "error": str(e)})
            return ExecutionSummary(
                workflow_key=workflow_key,
                matched=True,
                executed=False,
                success=False,
                error=str(e),
            )
        log_extra["run_id"] = run.id

        context = ExecutionContext(
            event=event,
            definition=definition,
            config=config,
            operations=self.operations,
            email_sender=self.email_sender,
            organization_name=organization_name,
            triggering_user=triggering_user,
            app_url=self.app_url,
            renderer=self._renderer,
            clock=self._clock,
        )

        try:
            result = await self._execute_isolated(handler, context)
        except Exception as e:
            completed_at = self._clock()
            duration_ms = _duration_ms(started_at, completed_at)
            logger.exception(
                "Workflow %s failed",
                workflow_key,
                extra={**log_extra, "duration_ms": duration_ms, "error": str(e)},
            )
            add_span_event(
                "workflow.failed",
                {**log_extra, "duration_ms": duration_ms, "error": str(e)},
            )
            finalize_error = await self._finalize(
                run.id,
                WorkflowRunUpdate(
                    status=WorkflowRunStatus.FAILED.value,
                    completed_at=completed_at,
                    duration_ms=duration_ms,
                    error=str(e),
                ),
                log_extra,
            )
            return ExecutionSummary(
                workflow_key=workflow_key,
                matched=True,
                executed=True,
                success=False,
                run_id=run.id,
                error=str(e) if finalize_error is None else f"{e}; {finalize_error}",
            )

        completed_at = self._clock()
        duration_ms = _duration_ms(started_at, completed_at)
        finalize_error = await self._finalize(
            run.id,
            WorkflowRunUpdate(
                status=WorkflowRunStatus.COMPLETED.value,
                completed_at=completed_at,
                duration_ms=duration_ms,
                email_recipient=result.recipient,
                email_subject=result.subject,
                result=_run_result(result),
            ),
            log_extra,
        )
        if finalize_error is not None:
            return ExecutionSummary(
                workflow_key=workflow_key,
                matched=True,
                executed=True,
                success=False,
                run_id=run.id,
                error=finalize_error,
            )
        self._observe(
            "workflow.completed",
            "Workflow %s completed",
            {**log_extra, "duration_ms": duration_ms},
        )
        return ExecutionSummary(
            workflow_key=workflow_key,
            matched=True,
            executed=True,
            success=True,
            run_id=run.id,
        )

    async def _execute_isolated(
        self, handler: WorkflowHandler, context: ExecutionContext
    ) -> HandlerResult:
        """Run the handler inside the isolation scope under the per-handler deadline."""
        timeout = self.handler_timeout_seconds
        try:
            async with self._isolation_factory():
                async with asyncio.timeout(timeout):
                    return await handler.execute(context)
        except TimeoutError as e:
            if timeout is None:
                raise
            raise WorkflowTimeoutException(handler.key.value, timeout) from e

    async def _finalize(
        self, run_id: str, data: WorkflowRunUpdate, log_extra: dict[str, Any]
    ) -> str | None:
        """Write the terminal run status; return an error message instead of raising."""
        try:
            await self.run_repo.update(run_id, data)
        except Exception as e:
            logger.exception(
                "Workflow %s: could not finalize run %s",
                log_extra["workflow_key"],
                run_id,
                extra={**log_extra, "error": str(e)},
            )
            return f"Failed to record run result: {e}"
        return None

    @staticmethod
    def _observe(name: str, message: str, extra: dict[str, Any]) -> None:
        logger.info(message, extra["workflow_key"], extra=extra)
        add_span_event(name, extra)
