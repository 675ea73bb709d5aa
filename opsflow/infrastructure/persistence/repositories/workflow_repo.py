"""Prebuilt workflow config and run repositories."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from opsflow.application.dtos.workflow import (
    WorkflowConfigResult,
    WorkflowRunCreate,
    WorkflowRunResult,
    WorkflowRunUpdate,
)
from opsflow.domain.exceptions import (
    InvalidRunTransitionException,
    ResourceNotFoundException,
)
from opsflow.infrastructure.persistence.models.workflow import (
    PrebuiltWorkflowConfig,
    PrebuiltWorkflowRun,
)
from opsflow.shared.enums import WorkflowRunStatus
from opsflow.shared.utils.serialization import to_json_compatible


def _config_to_result(c: PrebuiltWorkflowConfig) -> WorkflowConfigResult:
    """Map PrebuiltWorkflowConfig ORM to WorkflowConfigResult DTO."""
    return WorkflowConfigResult(
        id=c.id,
        organization_id=c.organization_id,
        workflow_key=c.workflow_key,
        enabled=c.enabled,
        email_subject=c.email_subject,
        email_body=c.email_body,
        template_version=c.template_version,
        updated_by_user_id=c.updated_by_user_id,
        created_at=c.created_at,
        updated_at=c.updated_at,
    )


def _run_to_result(r: PrebuiltWorkflowRun) -> WorkflowRunResult:
    """Map PrebuiltWorkflowRun ORM to WorkflowRunResult DTO."""
    return WorkflowRunResult(
        id=r.id,
        organization_id=r.organization_id,
        workflow_key=r.workflow_key,
        status=r.status,
        trigger_module=r.trigger_module,
        trigger_entity=r.trigger_entity,
        trigger_event=r.trigger_event,
        triggered_at=r.triggered_at,
        started_at=r.started_at,
        completed_at=r.completed_at,
        duration_ms=r.duration_ms,
        email_recipient=r.email_recipient,
        email_subject=r.email_subject,
        context=r.context,
        result=r.result,
        error=r.error,
    )


class WorkflowConfigRepository:
    """Per-tenant workflow config repository. Implements IWorkflowConfigRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _get_model(
        self, organization_id: str, workflow_key: str
    ) -> PrebuiltWorkflowConfig | None:
        result = await self.db.execute(
            select(PrebuiltWorkflowConfig).where(
                PrebuiltWorkflowConfig.organization_id == organization_id,
                PrebuiltWorkflowConfig.workflow_key == workflow_key,
            )
        )
        return result.scalar_one_or_none()

    async def list_by_organization(
        self, organization_id: str
    ) -> list[WorkflowConfigResult]:
        result = await self.db.execute(
            select(PrebuiltWorkflowConfig).where(
                PrebuiltWorkflowConfig.organization_id == organization_id
            )
        )
        return [_config_to_result(c) for c in result.scalars().all()]

    async def get(
        self, organization_id: str, workflow_key: str
    ) -> WorkflowConfigResult | None:
        row = await self._get_model(organization_id, workflow_key)
        return _config_to_result(row) if row else None

    async def save(
        self,
        organization_id: str,
        workflow_key: str,
        *,
        enabled: bool,
        email_subject: str,
        email_body: str,
        template_version: int,
        updated_by_user_id: str | None,
    ) -> WorkflowConfigResult:
        row = await self._get_model(organization_id, workflow_key)
        if row is None:
            row = PrebuiltWorkflowConfig(
                organization_id=organization_id,
                workflow_key=workflow_key,
            )
            self.db.add(row)
        row.enabled = enabled
        row.email_subject = email_subject
        row.email_body = email_body
        row.template_version = template_version
        row.updated_by_user_id = updated_by_user_id
        await self.db.flush()
        await self.db.refresh(row)
        return _config_to_result(row)

    async def list_enabled_organization_ids(self, workflow_key: str) -> list[str]:
        result = await self.db.execute(
            select(PrebuiltWorkflowConfig.organization_id)
            .where(
                PrebuiltWorkflowConfig.workflow_key == workflow_key,
                PrebuiltWorkflowConfig.enabled.is_(True),
            )
            .order_by(PrebuiltWorkflowConfig.organization_id)
        )
        return list(result.scalars().all())


class WorkflowRunRepository:
    """Workflow run repository. Implements IWorkflowRunRepository. Runs are never deleted."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create(self, data: WorkflowRunCreate) -> WorkflowRunResult:
        run = PrebuiltWorkflowRun(
            organization_id=data.organization_id,
            workflow_key=data.workflow_key,
            status=WorkflowRunStatus.RUNNING.value,
            trigger_module=data.trigger_module,
            trigger_entity=data.trigger_entity,
            trigger_event=data.trigger_event,
            triggered_at=data.triggered_at,
            started_at=data.started_at,
            context=to_json_compatible(data.context),
        )
        self.db.add(run)
        await self.db.flush()
        await self.db.refresh(run)
        return _run_to_result(run)

    async def update(self, run_id: str, data: WorkflowRunUpdate) -> WorkflowRunResult:
        result = await self.db.execute(
            select(PrebuiltWorkflowRun).where(PrebuiltWorkflowRun.id == run_id)
        )
        run = result.scalar_one_or_none()
        if run is None:
            raise ResourceNotFoundException("workflow_run", run_id)
        if WorkflowRunStatus(run.status).is_terminal:
            raise InvalidRunTransitionException(run_id, run.status, data.status)
        run.status = data.status
        run.completed_at = data.completed_at
        run.duration_ms = data.duration_ms
        run.email_recipient = data.email_recipient
        run.email_subject = data.email_subject
        run.result = to_json_compatible(data.result) if data.result is not None else None
        run.error = data.error
        await self.db.flush()
        await self.db.refresh(run)
        return _run_to_result(run)

    async def list_runs(
        self,
        organization_id: str,
        workflow_key: str | None = None,
        limit: int = 50,
    ) -> list[WorkflowRunResult]:
        q = select(PrebuiltWorkflowRun).where(
            PrebuiltWorkflowRun.organization_id == organization_id
        )
        if workflow_key is not None:
            q = q.where(PrebuiltWorkflowRun.workflow_key == workflow_key)
        q = q.order_by(
            PrebuiltWorkflowRun.created_at.desc(), PrebuiltWorkflowRun.id.desc()
        ).limit(limit)
        result = await self.db.execute(q)
        return [_run_to_result(r) for r in result.scalars().all()]
