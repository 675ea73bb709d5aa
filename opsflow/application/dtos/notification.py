"""DTOs for outbound notifications."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EmailResult:
    """Outcome of one email send."""

    success: bool
    message_id: str | None = None
    error: str | None = None
