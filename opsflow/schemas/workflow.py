"""Workflow boundary schemas: inbound events, dispatch summaries and run history."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from opsflow.domain.entities.event import WorkflowEvent
from opsflow.shared.utils.datetime import ensure_utc


class WorkflowEventIn(BaseModel):
    """Inbound event as produced by upstream modules. Accepts camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)

    organization_id: str = Field(..., min_length=1, alias="organizationId")
    module: str = Field(..., min_length=1, max_length=64)
    entity_type: str = Field(..., min_length=1, max_length=64, alias="entityType")
    event_type: str = Field(..., min_length=1, max_length=64, alias="eventType")
    payload: dict[str, Any] = Field(default_factory=dict)
    user_id: str | None = Field(default=None, alias="userId")
    triggered_at: datetime | None = Field(default=None, alias="triggeredAt")

    def to_entity(self) -> WorkflowEvent:
        return WorkflowEvent(
            organization_id=self.organization_id,
            module=self.module,
            entity_type=self.entity_type,
            event_type=self.event_type,
            payload=self.payload,
            user_id=self.user_id,
            triggered_at=ensure_utc(self.triggered_at),
        )


class ExecutionSummaryOut(BaseModel):
    """Per-handler dispatch outcome."""

    model_config = ConfigDict(from_attributes=True)

    workflow_key: str
    matched: bool
    executed: bool
    success: bool
    run_id: str | None = None
    error: str | None = None


class WorkflowRunOut(BaseModel):
    """Workflow run history entry."""

    model_config = ConfigDict(from_attributes=True)

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
