"""Composition root: wire repositories, operations, sender and engine for one session."""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from opsflow.application.dtos.workflow import ExecutionSummary
from opsflow.application.interfaces.services import IEmailSender
from opsflow.application.services.workflow_config_service import WorkflowConfigService
from opsflow.application.services.workflow_operations import WorkflowOperations
from opsflow.core.config import Settings, get_settings
from opsflow.domain.entities.event import WorkflowEvent
from opsflow.infrastructure.persistence.database import get_db_transactional
from opsflow.infrastructure.persistence.repositories import (
    CustomerRepository,
    InvoiceRepository,
    OperationsMetricsRepository,
    OrganizationRepository,
    ProjectRepository,
    ProjectResourceRepository,
    TaskRepository,
    UserRepository,
    WorkflowConfigRepository,
    WorkflowRunRepository,
)
from opsflow.infrastructure.services.workflow_engine import WorkflowEngine
from opsflow.infrastructure.services.workflow_notification_service import (
    create_email_sender,
)


def build_workflow_operations(session: AsyncSession) -> WorkflowOperations:
    """Domain operations over the session; metrics counts use their own sessions on the same engine."""
    metrics_factory = async_sessionmaker(
        bind=session.bind, class_=AsyncSession, expire_on_commit=False
    )
    return WorkflowOperations(
        customer_repo=CustomerRepository(session),
        project_repo=ProjectRepository(session),
        task_repo=TaskRepository(session),
        project_resource_repo=ProjectResourceRepository(session),
        invoice_repo=InvoiceRepository(session),
        metrics_repo=OperationsMetricsRepository(metrics_factory),
    )


def build_workflow_engine(
    session: AsyncSession,
    *,
    email_sender: IEmailSender | None = None,
    settings: Settings | None = None,
) -> WorkflowEngine:
    """Engine whose handlers each run inside a SAVEPOINT on session."""
    settings = settings or get_settings()
    return WorkflowEngine(
        config_repo=WorkflowConfigRepository(session),
        run_repo=WorkflowRunRepository(session),
        organization_repo=OrganizationRepository(session),
        user_repo=UserRepository(session),
        operations=build_workflow_operations(session),
        email_sender=email_sender or create_email_sender(settings),
        app_url=settings.app_url,
        handler_timeout_seconds=settings.workflow_handler_timeout_seconds,
        isolation_factory=session.begin_nested,
    )


def build_workflow_config_service(session: AsyncSession) -> WorkflowConfigService:
    return WorkflowConfigService(
        WorkflowConfigRepository(session), WorkflowRunRepository(session)
    )


async def dispatch_event(
    event: WorkflowEvent, *, email_sender: IEmailSender | None = None
) -> list[ExecutionSummary]:
    """Execute event in one transaction; commits run records and surviving side effects."""
    async with get_db_transactional() as session:
        engine = build_workflow_engine(session, email_sender=email_sender)
        return await engine.execute(event)
