"""Project, ProjectResource and Task ORM models."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from opsflow.domain.enums import Priority, ProjectStatus, TaskStatus
from opsflow.infrastructure.persistence.database import Base
from opsflow.infrastructure.persistence.models.mixins import MultiTenantModel, TimestampMixin


class Project(MultiTenantModel, Base):
    """Delivery project. Table: project."""

    __tablename__ = "project"

    customer_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("customer.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=ProjectStatus.PLANNED.value, index=True
    )
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    budget: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    created_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        Index("ix_project_organization_customer_created", "organization_id", "customer_id", "created_at"),
    )


class ProjectResource(TimestampMixin, Base):
    """Assignment of a user to a project. Table: project_resource. PK (project_id, assignee_id)."""

    __tablename__ = "project_resource"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), primary_key=True
    )
    assignee_id: Mapped[str] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="CASCADE"), primary_key=True
    )
    role: Mapped[str | None] = mapped_column(String, nullable=True)
    allocation: Mapped[int] = mapped_column(Integer, nullable=False, default=100)


class Task(MultiTenantModel, Base):
    """Project task. Table: task."""

    __tablename__ = "task"

    project_id: Mapped[str] = mapped_column(
        String, ForeignKey("project.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, default=TaskStatus.TODO.value)
    priority: Mapped[str] = mapped_column(String, nullable=False, default=Priority.MEDIUM.value)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
    assigned_to_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )
