"""PrebuiltWorkflowConfig and PrebuiltWorkflowRun ORM models."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from opsflow.infrastructure.persistence.database import Base
from opsflow.infrastructure.persistence.models.mixins import MultiTenantModel
from opsflow.shared.enums import WorkflowRunStatus


class PrebuiltWorkflowConfig(MultiTenantModel, Base):
    """Per-tenant override of a prebuilt workflow. Table: prebuilt_workflow_config."""

    __tablename__ = "prebuilt_workflow_config"

    workflow_key: Mapped[str] = mapped_column(String, nullable=False)
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    email_subject: Mapped[str] = mapped_column(Text, nullable=False)
    email_body: Mapped[str] = mapped_column(Text, nullable=False)
    template_version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, server_default=sa.text("1")
    )
    updated_by_user_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint(
            "organization_id",
            "workflow_key",
            name="uq_prebuilt_workflow_config_organization_key",
        ),
    )


class PrebuiltWorkflowRun(MultiTenantModel, Base):
    """One handler execution for one event. Table: prebuilt_workflow_run. Never deleted."""

    __tablename__ = "prebuilt_workflow_run"

    workflow_key: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=WorkflowRunStatus.RUNNING.value, index=True
    )
    trigger_module: Mapped[str] = mapped_column(String, nullable=False)
    trigger_entity: Mapped[str] = mapped_column(String, nullable=False)
    trigger_event: Mapped[str] = mapped_column(String, nullable=False)
    triggered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)
    email_recipient: Mapped[str | None] = mapped_column(String, nullable=True)
    email_subject: Mapped[str | None] = mapped_column(Text, nullable=True)
    context: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    result: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "ix_prebuilt_workflow_run_organization_key_created",
            "organization_id",
            "workflow_key",
            "created_at",
        ),
        CheckConstraint(
            "status IN ({})".format(
                ", ".join(
                    "'{}'".format(v.replace("'", "''"))
                    for v in WorkflowRunStatus.values()
                )
            ),
            name="prebuilt_workflow_run_status_check",
        ),
    )
