"""Tests for domain exception codes and details."""

from opsflow.domain.exceptions import (
    InvalidRunTransitionException,
    NotificationDeliveryException,
    OpsflowException,
    ResourceNotFoundException,
    SqlNotConfiguredException,
    UnknownWorkflowException,
    WorkflowPreconditionException,
    WorkflowTimeoutException,
)


def test_base_exception_defaults_code_to_class_name() -> None:
    exc = OpsflowException("boom")
    assert exc.error_code == "OpsflowException"
    assert exc.details == {}
    assert str(exc) == "boom"


def test_resource_not_found() -> None:
    exc = ResourceNotFoundException("customer", "cust-9")
    assert exc.message == "customer not found: cust-9"
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "customer", "resource_id": "cust-9"}


def test_precondition_carries_workflow_and_field() -> None:
    exc = WorkflowPreconditionException("lead-to-client", "Customer ID missing", field="customerId")
    assert exc.error_code == "WORKFLOW_PRECONDITION_FAILED"
    assert exc.details == {"workflow_key": "lead-to-client", "field": "customerId"}


def test_notification_failure_message_is_reason() -> None:
    exc = NotificationDeliveryException("ada@example.com", "mailbox full")
    assert str(exc) == "mailbox full"
    assert exc.details == {"recipient": "ada@example.com"}


def test_timeout_message() -> None:
    exc = WorkflowTimeoutException("invoice-tracking", 2.5)
    assert exc.message == "Workflow invoice-tracking timed out after 2.5s"
    assert exc.error_code == "WORKFLOW_TIMEOUT"


def test_run_transition_and_unknown_workflow() -> None:
    transition = InvalidRunTransitionException("run-1", "COMPLETED", "FAILED")
    assert transition.error_code == "INVALID_RUN_TRANSITION"
    assert "run-1" in transition.message
    assert UnknownWorkflowException("nope").details == {"workflow_key": "nope"}


def test_sql_not_configured_is_opsflow_exception() -> None:
    assert isinstance(SqlNotConfiguredException(), OpsflowException)
