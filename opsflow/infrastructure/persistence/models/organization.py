"""Organization (tenant) and User ORM models."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from opsflow.infrastructure.persistence.database import Base
from opsflow.infrastructure.persistence.models.mixins import CuidMixin, TimestampMixin


class Organization(CuidMixin, TimestampMixin, Base):
    """Tenant. Table: organization."""

    __tablename__ = "organization"

    name: Mapped[str] = mapped_column(String, nullable=False)


class User(CuidMixin, TimestampMixin, Base):
    """Application user (global, may belong to several organizations). Table: app_user."""

    __tablename__ = "app_user"

    name: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
