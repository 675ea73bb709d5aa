"""Domain entities: events and workflow definitions."""

from opsflow.domain.entities.event import WorkflowEvent
from opsflow.domain.entities.workflow import (
    EmailDefaults,
    ResolvedWorkflowConfig,
    TemplateVariable,
    WorkflowDefinition,
)

__all__ = [
    "WorkflowEvent",
    "EmailDefaults",
    "ResolvedWorkflowConfig",
    "TemplateVariable",
    "WorkflowDefinition",
]
