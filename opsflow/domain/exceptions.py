"""Domain exceptions for the opsflow engine.

Defines domain-level exceptions that represent business rule violations and
handler failures. The dispatcher catches them per handler and records the
message on the run; they never escape execute() except for the tenant
config load.
"""

from typing import Any


class OpsflowException(Exception):
    """Base exception for all opsflow errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(OpsflowException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(OpsflowException):
    """Raised when a requested resource is not found in the tenant."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'customer', 'project').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class WorkflowPreconditionException(OpsflowException):
    """Raised when an event lacks what a handler needs (customer id, recipient, ...)."""

    def __init__(
        self, workflow_key: str, message: str, field: str | None = None
    ) -> None:
        """Initialize with workflow key, message and optional payload field.

        Args:
            workflow_key: Key of the handler that rejected the event.
            message: Human-readable description.
            field: Optional payload field that was missing or unusable.
        """
        details: dict[str, Any] = {"workflow_key": workflow_key}
        if field:
            details["field"] = field
        super().__init__(message, "WORKFLOW_PRECONDITION_FAILED", details)


class NotificationDeliveryException(OpsflowException):
    """Raised when the email transport reports a failed send."""

    def __init__(self, recipient: str, reason: str) -> None:
        super().__init__(
            reason,
            "NOTIFICATION_FAILED",
            {"recipient": recipient},
        )


class WorkflowTimeoutException(OpsflowException):
    """Raised when a handler exceeds its deadline."""

    def __init__(self, workflow_key: str, timeout_seconds: float) -> None:
        super().__init__(
            f"Workflow {workflow_key} timed out after {timeout_seconds:g}s",
            "WORKFLOW_TIMEOUT",
            {"workflow_key": workflow_key, "timeout_seconds": timeout_seconds},
        )


class InvalidRunTransitionException(OpsflowException):
    """Raised when a run is moved out of a terminal status (runs leave RUNNING once)."""

    def __init__(self, run_id: str, current_status: str, target_status: str) -> None:
        """Initialize with run id and the rejected transition.

        Args:
            run_id: Run whose status update was rejected.
            current_status: Status currently stored on the run.
            target_status: Status that was requested.
        """
        super().__init__(
            f"Run {run_id} cannot transition from {current_status} to {target_status}",
            "INVALID_RUN_TRANSITION",
            {
                "run_id": run_id,
                "current_status": current_status,
                "target_status": target_status,
            },
        )


class UnknownWorkflowException(OpsflowException):
    """Raised when a workflow key is not part of the prebuilt catalog."""

    def __init__(self, workflow_key: str) -> None:
        super().__init__(
            f"Unknown workflow: {workflow_key}",
            "UNKNOWN_WORKFLOW",
            {"workflow_key": workflow_key},
        )


class SqlNotConfiguredException(OpsflowException):
    """Raised when an operation requires Postgres but DATABASE_URL is not set."""

    def __init__(self) -> None:
        super().__init__(
            message="This operation requires a SQL database that is not configured.",
            error_code="SERVICE_UNAVAILABLE",
        )
