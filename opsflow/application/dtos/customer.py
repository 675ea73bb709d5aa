"""DTOs for CRM customers touched by workflows (no dependency on ORM)."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CustomerResult:
    """Customer read-model."""

    id: str
    organization_id: str
    type: str
    status: str | None
    first_name: str | None
    last_name: str | None
    company: str | None
    email: str | None
    phone: str | None = None
    address: str | None = None


@dataclass(frozen=True)
class CustomerPromotionResult:
    """Outcome of promoting a customer to client."""

    customer_id: str
    previous_type: str | None
    was_updated: bool
