"""Invoice and InvoiceItem ORM models."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from opsflow.domain.enums import InvoiceStatus
from opsflow.infrastructure.persistence.database import Base
from opsflow.infrastructure.persistence.models.mixins import CuidMixin, MultiTenantModel, TimestampMixin

_MONEY = Numeric(12, 2)


class Invoice(MultiTenantModel, Base):
    """Customer invoice. Table: invoice. invoice_number is unique per organization."""

    __tablename__ = "invoice"

    customer_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("customer.id", ondelete="SET NULL"), nullable=True, index=True
    )
    invoice_number: Mapped[str] = mapped_column(String, nullable=False)
    customer_name: Mapped[str] = mapped_column(String, nullable=False)
    customer_email: Mapped[str] = mapped_column(String, nullable=False, default="")
    customer_address: Mapped[str | None] = mapped_column(Text, nullable=True)
    customer_phone: Mapped[str | None] = mapped_column(String, nullable=True)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=InvoiceStatus.DRAFT.value, index=True
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    issue_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    subtotal: Mapped[Decimal] = mapped_column(_MONEY, nullable=False, default=Decimal(0))
    tax_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False, default=Decimal(0))
    discount_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False, default=Decimal(0))
    shipping_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False, default=Decimal(0))
    total_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False, default=Decimal(0))
    paid_amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False, default=Decimal(0))
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True
    )

    items: Mapped[list["InvoiceItem"]] = relationship(
        back_populates="invoice", cascade="all, delete-orphan", lazy="selectin"
    )

    __table_args__ = (
        UniqueConstraint("organization_id", "invoice_number", name="uq_invoice_organization_number"),
    )


class InvoiceItem(CuidMixin, TimestampMixin, Base):
    """Invoice line item. Table: invoice_item."""

    __tablename__ = "invoice_item"

    invoice_id: Mapped[str] = mapped_column(
        String, ForeignKey("invoice.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal(1))
    unit_price: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)

    invoice: Mapped[Invoice] = relationship(back_populates="items")
