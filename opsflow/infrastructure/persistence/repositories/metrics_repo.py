"""Read-only operational counts for the internal health digest.

Each count opens its own session so the five queries can run concurrently
(an AsyncSession does not allow concurrent operations).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from opsflow.domain.enums import CustomerType, InvoiceStatus, ProjectStatus, TaskStatus
from opsflow.infrastructure.persistence.models.customer import Customer
from opsflow.infrastructure.persistence.models.invoice import Invoice
from opsflow.infrastructure.persistence.models.project import Project, Task


class OperationsMetricsRepository:
    """Implements IOperationsMetricsRepository over a session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def _count(self, model: Any, *conditions: Any) -> int:
        async with self.session_factory() as session:
            result = await session.execute(
                select(func.count()).select_from(model).where(*conditions)
            )
            return int(result.scalar_one())

    async def count_active_projects(self, organization_id: str) -> int:
        return await self._count(
            Project,
            Project.organization_id == organization_id,
            Project.status.in_(
                [ProjectStatus.PLANNED.value, ProjectStatus.IN_PROGRESS.value]
            ),
        )

    async def count_projects_at_risk(self, organization_id: str, now: datetime) -> int:
        return await self._count(
            Project,
            Project.organization_id == organization_id,
            Project.status == ProjectStatus.IN_PROGRESS.value,
            Project.end_date.is_not(None),
            Project.end_date < now,
        )

    async def count_overdue_invoices(self, organization_id: str, now: datetime) -> int:
        return await self._count(
            Invoice,
            Invoice.organization_id == organization_id,
            Invoice.status.in_([InvoiceStatus.SENT.value, InvoiceStatus.OVERDUE.value]),
            Invoice.due_date < now,
        )

    async def count_active_clients(self, organization_id: str) -> int:
        return await self._count(
            Customer,
            Customer.organization_id == organization_id,
            Customer.type == CustomerType.CUSTOMER.value,
        )

    async def count_overdue_tasks(self, organization_id: str, now: datetime) -> int:
        return await self._count(
            Task,
            Task.organization_id == organization_id,
            Task.status.not_in([TaskStatus.DONE.value, TaskStatus.ARCHIVED.value]),
            Task.due_date.is_not(None),
            Task.due_date < now,
        )
