"""Domain enumerations for the business records touched by workflows.

Values are uppercase to match the stored representation used by the rest of
the business application (CRM, projects, finance).
"""

from enum import Enum

from opsflow.shared.enums import _ValuesMixin


class CustomerType(_ValuesMixin, str, Enum):
    """Customer lifecycle type."""

    LEAD = "LEAD"
    PROSPECT = "PROSPECT"
    CUSTOMER = "CUSTOMER"
    FORMER = "FORMER"


class LeadStatus(_ValuesMixin, str, Enum):
    """CRM pipeline status of a customer or deal."""

    NEW = "NEW"
    CONTACTED = "CONTACTED"
    QUALIFIED = "QUALIFIED"
    PROPOSAL = "PROPOSAL"
    NEGOTIATION = "NEGOTIATION"
    CLOSED_WON = "CLOSED_WON"
    CLOSED_LOST = "CLOSED_LOST"


class ProjectStatus(_ValuesMixin, str, Enum):
    """Project delivery status."""

    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskStatus(_ValuesMixin, str, Enum):
    """Task board column."""

    BACKLOG = "BACKLOG"
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    REVIEW = "REVIEW"
    DONE = "DONE"
    ARCHIVED = "ARCHIVED"


class Priority(_ValuesMixin, str, Enum):
    """Task priority."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class InvoiceStatus(_ValuesMixin, str, Enum):
    """Invoice lifecycle status."""

    DRAFT = "DRAFT"
    SENT = "SENT"
    VIEWED = "VIEWED"
    PAID = "PAID"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    OVERDUE = "OVERDUE"
    CANCELLED = "CANCELLED"
