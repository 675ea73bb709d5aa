"""Invoice repository."""

from __future__ import annotations

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from opsflow.application.dtos.invoice import InvoiceCreate, InvoiceResult
from opsflow.infrastructure.persistence.models.invoice import Invoice, InvoiceItem
from opsflow.infrastructure.persistence.repositories.base import BaseRepository


def _to_result(i: Invoice) -> InvoiceResult:
    """Map Invoice ORM to InvoiceResult DTO."""
    return InvoiceResult(
        id=i.id,
        organization_id=i.organization_id,
        invoice_number=i.invoice_number,
        total_amount=i.total_amount,
        due_date=i.due_date,
        status=i.status,
        currency=i.currency,
        customer_id=i.customer_id,
        notes=i.notes,
    )


class InvoiceRepository(BaseRepository[Invoice]):
    """Invoice repository. Implements IInvoiceRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Invoice)

    async def get_by_id(
        self, organization_id: str, invoice_id: str
    ) -> InvoiceResult | None:
        row = await self._get_scoped(organization_id, invoice_id)
        return _to_result(row) if row else None

    async def find_by_notes_marker(
        self, organization_id: str, marker: str
    ) -> InvoiceResult | None:
        result = await self.db.execute(
            select(Invoice)
            .where(
                Invoice.organization_id == organization_id,
                or_(
                    Invoice.notes == marker,
                    Invoice.notes.startswith(f"{marker}\n", autoescape=True),
                    Invoice.notes.endswith(f"\n{marker}", autoescape=True),
                    Invoice.notes.contains(f"\n{marker}\n", autoescape=True),
                ),
            )
            .order_by(Invoice.created_at.asc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _to_result(row) if row else None

    async def count_by_organization(self, organization_id: str) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(Invoice)
            .where(Invoice.organization_id == organization_id)
        )
        return int(result.scalar_one())

    async def create(self, organization_id: str, data: InvoiceCreate) -> InvoiceResult:
        """Create an invoice with a single line item; subtotal equals total."""
        invoice = Invoice(
            organization_id=organization_id,
            customer_id=data.customer_id,
            invoice_number=data.invoice_number,
            customer_name=data.customer_name,
            customer_email=data.customer_email,
            customer_address=data.customer_address,
            customer_phone=data.customer_phone,
            status=data.status,
            currency=data.currency,
            issue_date=data.issue_date,
            due_date=data.due_date,
            subtotal=data.total_amount,
            total_amount=data.total_amount,
            notes=data.notes,
            created_by_id=data.created_by_id,
            items=[
                InvoiceItem(
                    description=data.item_description,
                    quantity=1,
                    unit_price=data.total_amount,
                    subtotal=data.total_amount,
                )
            ],
        )
        return _to_result(await self._add(invoice))
