"""Project, task and project resource repositories."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from opsflow.application.dtos.project import ProjectCreate, ProjectResult, TaskCreate
from opsflow.domain.enums import ProjectStatus
from opsflow.domain.exceptions import ResourceNotFoundException
from opsflow.infrastructure.persistence.models.project import Project, ProjectResource, Task
from opsflow.infrastructure.persistence.repositories.base import BaseRepository


def _to_result(p: Project) -> ProjectResult:
    """Map Project ORM to ProjectResult DTO."""
    return ProjectResult(
        id=p.id,
        organization_id=p.organization_id,
        customer_id=p.customer_id,
        name=p.name,
        status=p.status,
        start_date=p.start_date,
        end_date=p.end_date,
        budget=p.budget,
        currency=p.currency,
        created_by_id=p.created_by_id,
        description=p.description,
        created_at=p.created_at,
    )


class ProjectRepository(BaseRepository[Project]):
    """Project repository. Implements IProjectRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Project)

    async def get_by_id(
        self, organization_id: str, project_id: str
    ) -> ProjectResult | None:
        row = await self._get_scoped(organization_id, project_id)
        return _to_result(row) if row else None

    async def get_latest_for_customer(
        self, organization_id: str, customer_id: str
    ) -> ProjectResult | None:
        result = await self.db.execute(
            select(Project)
            .where(
                Project.organization_id == organization_id,
                Project.customer_id == customer_id,
            )
            .order_by(Project.created_at.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _to_result(row) if row else None

    async def create(self, organization_id: str, data: ProjectCreate) -> ProjectResult:
        project = Project(
            organization_id=organization_id,
            customer_id=data.customer_id,
            name=data.name,
            description=data.description,
            status=data.status,
            start_date=data.start_date,
            budget=data.budget,
            currency=data.currency,
            created_by_id=data.created_by_id,
        )
        return _to_result(await self._add(project))

    async def mark_completed(
        self, organization_id: str, project_id: str, end_date: datetime
    ) -> None:
        result = await self.db.execute(
            update(Project)
            .where(
                Project.id == project_id,
                Project.organization_id == organization_id,
            )
            .values(status=ProjectStatus.COMPLETED.value, end_date=end_date)
        )
        if result.rowcount == 0:
            raise ResourceNotFoundException("project", project_id)


class TaskRepository:
    """Task repository. Implements ITaskRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def count_by_project(self, organization_id: str, project_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Task)
            .where(
                Task.organization_id == organization_id,
                Task.project_id == project_id,
            )
        )
        return int(result.scalar_one())

    async def create_many(self, organization_id: str, tasks: list[TaskCreate]) -> int:
        if not tasks:
            return 0
        self.db.add_all(
            [
                Task(
                    organization_id=organization_id,
                    project_id=t.project_id,
                    title=t.title,
                    status=t.status,
                    priority=t.priority,
                    order=t.order,
                    due_date=t.due_date,
                    created_by_id=t.created_by_id,
                    assigned_to_id=t.assigned_to_id,
                )
                for t in tasks
            ]
        )
        await self.db.flush()
        return len(tasks)


class ProjectResourceRepository:
    """Project resource repository. Implements IProjectResourceRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def upsert(
        self, project_id: str, assignee_id: str, *, role: str, allocation: int
    ) -> None:
        stmt = pg_insert(ProjectResource).values(
            project_id=project_id,
            assignee_id=assignee_id,
            role=role,
            allocation=allocation,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[ProjectResource.project_id, ProjectResource.assignee_id],
            set_={"updated_at": func.now()},
        )
        await self.db.execute(stmt)
