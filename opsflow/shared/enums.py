"""Shared enumerations for the opsflow engine.

Cross-cutting enums used by application and infrastructure (workflow keys,
run lifecycle). Business enums for the domain store (customer type, project
status, ...) live in opsflow.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class WorkflowKey(_ValuesMixin, str, Enum):
    """Stable identifiers of the prebuilt business-process workflows."""

    LEAD_TO_CLIENT = "lead-to-client"
    CLIENT_ONBOARDING = "client-onboarding"
    PROJECT_LIFECYCLE = "project-lifecycle"
    INVOICE_TRACKING = "invoice-tracking"
    CONTRACT_RENEWAL = "contract-renewal"
    INTERNAL_HEALTH = "internal-health"


class WorkflowRunStatus(_ValuesMixin, str, Enum):
    """Workflow run lifecycle status. RUNNING transitions once to a terminal status."""

    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self is not WorkflowRunStatus.RUNNING
