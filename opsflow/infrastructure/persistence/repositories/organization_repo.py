"""Organization and user lookups used for template context."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from opsflow.application.dtos.user import UserContact
from opsflow.infrastructure.persistence.models.organization import Organization, User


class OrganizationRepository:
    """Organization repository. Implements IOrganizationRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_name(self, organization_id: str) -> str | None:
        result = await self.db.execute(
            select(Organization.name).where(Organization.id == organization_id)
        )
        return result.scalar_one_or_none()


class UserRepository:
    """User repository. Implements IUserRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_contact(self, user_id: str) -> UserContact | None:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            return None
        return UserContact(id=user.id, name=user.name, email=user.email)
