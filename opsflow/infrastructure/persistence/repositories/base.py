"""Base repository: tenant-scoped lookup and create for multi-tenant models."""

from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from opsflow.infrastructure.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with organization-scoped get and add.

    Subclasses map ORM rows to application DTOs; models must carry
    id and organization_id (MultiTenantModel).
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_scoped(self, organization_id: str, entity_id: str) -> ModelType | None:
        """Return a single record by primary key if it belongs to the organization."""
        model: Any = self.model
        result = await self.db.execute(
            select(self.model).where(
                model.id == entity_id,
                model.organization_id == organization_id,
            )
        )
        return result.scalar_one_or_none()

    async def _add(self, obj: ModelType) -> ModelType:
        """Persist a new record and refresh server defaults."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj
