"""Pydantic boundary schemas."""

from opsflow.schemas.workflow import ExecutionSummaryOut, WorkflowEventIn, WorkflowRunOut

__all__ = ["ExecutionSummaryOut", "WorkflowEventIn", "WorkflowRunOut"]
