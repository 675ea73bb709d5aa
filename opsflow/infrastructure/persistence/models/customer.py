"""Customer ORM model (CRM contact / client)."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from opsflow.domain.enums import CustomerType
from opsflow.infrastructure.persistence.database import Base
from opsflow.infrastructure.persistence.models.mixins import MultiTenantModel


class Customer(MultiTenantModel, Base):
    """CRM customer. Table: customer."""

    __tablename__ = "customer"

    type: Mapped[str] = mapped_column(
        String, nullable=False, default=CustomerType.LEAD.value, index=True
    )
    status: Mapped[str | None] = mapped_column(String, nullable=True)
    first_name: Mapped[str | None] = mapped_column(String, nullable=True)
    last_name: Mapped[str | None] = mapped_column(String, nullable=True)
    company: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
