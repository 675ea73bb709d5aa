"""DTOs for users referenced by workflows."""

from dataclasses import dataclass


@dataclass(frozen=True)
class UserContact:
    """Name and email of the user who triggered an event."""

    id: str
    name: str | None
    email: str | None
