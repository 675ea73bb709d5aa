"""Customer repository (CRM contacts and clients)."""

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from opsflow.application.dtos.customer import CustomerResult
from opsflow.domain.exceptions import ResourceNotFoundException
from opsflow.infrastructure.persistence.models.customer import Customer
from opsflow.infrastructure.persistence.repositories.base import BaseRepository


def _to_result(c: Customer) -> CustomerResult:
    """Map Customer ORM to CustomerResult DTO."""
    return CustomerResult(
        id=c.id,
        organization_id=c.organization_id,
        type=c.type,
        status=c.status,
        first_name=c.first_name,
        last_name=c.last_name,
        company=c.company,
        email=c.email,
        phone=c.phone,
        address=c.address,
    )


class CustomerRepository(BaseRepository[Customer]):
    """Customer repository. Implements ICustomerRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Customer)

    async def get_by_id(
        self, organization_id: str, customer_id: str
    ) -> CustomerResult | None:
        row = await self._get_scoped(organization_id, customer_id)
        return _to_result(row) if row else None

    async def update_type_and_status(
        self,
        organization_id: str,
        customer_id: str,
        *,
        type: str,
        status: str | None,
    ) -> None:
        result = await self.db.execute(
            update(Customer)
            .where(
                Customer.id == customer_id,
                Customer.organization_id == organization_id,
            )
            .values(type=type, status=status)
        )
        if result.rowcount == 0:
            raise ResourceNotFoundException("customer", customer_id)
