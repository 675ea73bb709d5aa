"""DTOs for invoices created by workflows and the operations snapshot."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class InvoiceResult:
    """Invoice read-model."""

    id: str
    organization_id: str
    invoice_number: str
    total_amount: Decimal
    due_date: datetime | None
    status: str
    currency: str
    customer_id: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class InvoiceCreate:
    """Data for creating a single-line invoice."""

    invoice_number: str
    customer_id: str
    customer_name: str
    customer_email: str
    status: str
    currency: str
    issue_date: datetime
    due_date: datetime | None
    total_amount: Decimal
    item_description: str
    notes: str | None = None
    customer_address: str | None = None
    customer_phone: str | None = None
    created_by_id: str | None = None


@dataclass(frozen=True)
class InvoiceDraftResult:
    """Invoice located or created by a workflow (created=False when it already existed)."""

    invoice_id: str
    invoice_number: str
    created: bool
    amount: Decimal
    due_date: datetime | None
    status: str
    currency: str


@dataclass(frozen=True)
class OperationsSnapshot:
    """Read-only operational counts for one tenant."""

    active_project_count: int
    projects_at_risk_count: int
    overdue_invoice_count: int
    active_client_count: int
    overdue_task_count: int
