"""Workflow event domain entity.

Represents something that happened in the business domain (a deal's status
changed, a project was created). Produced upstream; consumed by the
dispatcher. Events are immutable; use a frozen entity.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from opsflow.domain.exceptions import ValidationException


@dataclass(frozen=True)
class WorkflowEvent:
    """Immutable domain entity for a triggering event.

    Payload shape is heterogeneous per event source and is never validated
    here; handlers probe it through the payload extractors. The payload is
    copied on construction so later mutation by the caller cannot leak in.
    """

    organization_id: str
    module: str
    entity_type: str
    event_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    user_id: str | None = None
    triggered_at: datetime | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", dict(self.payload or {}))
        self.validate()

    def validate(self) -> None:
        """Validate required identity fields. Raises ValidationException if invalid."""
        if not self.organization_id:
            raise ValidationException(
                "Event must belong to an organization", field="organization_id"
            )
        if not self.module:
            raise ValidationException("Event module is required", field="module")
        if not self.entity_type:
            raise ValidationException("Event entity type is required", field="entity_type")
        if not self.event_type:
            raise ValidationException("Event type is required", field="event_type")

    @property
    def normalized_module(self) -> str:
        return self.module.strip().lower()

    @property
    def normalized_entity_type(self) -> str:
        return self.entity_type.strip().lower()

    @property
    def normalized_event_type(self) -> str:
        return self.event_type.strip().lower()
