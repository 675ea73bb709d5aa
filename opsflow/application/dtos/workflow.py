"""DTOs for prebuilt workflow configs, runs, and execution results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from opsflow.application.dtos.notification import EmailResult
from opsflow.domain.entities.workflow import ResolvedWorkflowConfig, WorkflowDefinition


@dataclass(frozen=True)
class WorkflowConfigResult:
    """Stored per-tenant workflow config (read-model)."""

    id: str
    organization_id: str
    workflow_key: str
    enabled: bool
    email_subject: str
    email_body: str
    template_version: int
    updated_by_user_id: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class WorkflowRunCreate:
    """Data for creating a run in RUNNING status."""

    organization_id: str
    workflow_key: str
    trigger_module: str
    trigger_entity: str
    trigger_event: str
    triggered_at: datetime
    started_at: datetime
    context: dict[str, Any]


@dataclass(frozen=True)
class WorkflowRunUpdate:
    """Terminal update for a run (COMPLETED or FAILED)."""

    status: str
    completed_at: datetime
    duration_ms: int
    email_recipient: str | None = None
    email_subject: str | None = None
    result: dict[str, Any] | None = None
    error: str | None = None


@dataclass(frozen=True)
class WorkflowRunResult:
    """Workflow run read-model."""

    id: str
    organization_id: str
    workflow_key: str
    status: str
    trigger_module: str
    trigger_entity: str
    trigger_event: str
    triggered_at: datetime
    started_at: datetime
    completed_at: datetime | None = None
    duration_ms: int | None = None
    email_recipient: str | None = None
    email_subject: str | None = None
    context: dict[str, Any] | None = None
    result: dict[str, Any] | None = None
    error: str | None = None


@dataclass(frozen=True)
class HandlerResult:
    """What a handler hands back to the dispatcher; details become the run result."""

    recipient: str | None = None
    subject: str | None = None
    email: EmailResult | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ExecutionSummary:
    """Per-handler outcome of one dispatch."""

    workflow_key: str
    matched: bool
    executed: bool
    success: bool
    run_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class WorkflowOverview:
    """Catalog entry paired with the tenant's effective config."""

    definition: WorkflowDefinition
    config: ResolvedWorkflowConfig
