"""Prebuilt workflow domain entities.

A workflow definition is static catalog metadata (title, trigger text,
email defaults). A resolved config is the per-tenant view of one definition:
stored overrides merged over the defaults.
"""

from dataclasses import dataclass

from opsflow.shared.enums import WorkflowKey


@dataclass(frozen=True)
class TemplateVariable:
    """A documented template token available to a workflow's email."""

    token: str
    label: str
    description: str


@dataclass(frozen=True)
class EmailDefaults:
    """Default subject/body and the tokens they may reference."""

    subject: str
    body: str
    variables: tuple[TemplateVariable, ...] = ()

    @property
    def tokens(self) -> tuple[str, ...]:
        return tuple(variable.token for variable in self.variables)


@dataclass(frozen=True)
class WorkflowDefinition:
    """Catalog entry for one prebuilt business-process workflow."""

    key: WorkflowKey
    title: str
    short_description: str
    overview: str
    trigger: str
    actions: tuple[str, ...]
    category: str
    module_dependencies: tuple[str, ...]
    highlight: str
    email_defaults: EmailDefaults


@dataclass(frozen=True)
class ResolvedWorkflowConfig:
    """Effective configuration of a workflow for one tenant.

    enabled is False unless a stored config explicitly enables the workflow.
    is_customized is True when a stored config exists for the tenant.
    """

    workflow_key: WorkflowKey
    enabled: bool
    email_subject: str
    email_body: str
    template_version: int
    is_customized: bool
