"""Per-tenant prebuilt workflow configuration: resolution and management.

A stored config overrides the catalog defaults. Without one, a workflow is
disabled and uses the default templates.
"""

from __future__ import annotations

from opsflow.application.dtos.workflow import (
    WorkflowConfigResult,
    WorkflowOverview,
    WorkflowRunResult,
)
from opsflow.application.interfaces.repositories import (
    IWorkflowConfigRepository,
    IWorkflowRunRepository,
)
from opsflow.application.workflows.definitions import (
    PREBUILT_WORKFLOWS,
    get_workflow_definition,
)
from opsflow.domain.entities.workflow import ResolvedWorkflowConfig, WorkflowDefinition
from opsflow.domain.exceptions import ValidationException

DEFAULT_TEMPLATE_VERSION = 1
MAX_RUNS_LIMIT = 200


def resolve_workflow_config(
    definition: WorkflowDefinition, stored: WorkflowConfigResult | None
) -> ResolvedWorkflowConfig:
    """Merge a stored config over the definition's defaults."""
    if stored is None:
        return ResolvedWorkflowConfig(
            workflow_key=definition.key,
            enabled=False,
            email_subject=definition.email_defaults.subject,
            email_body=definition.email_defaults.body,
            template_version=DEFAULT_TEMPLATE_VERSION,
            is_customized=False,
        )
    return ResolvedWorkflowConfig(
        workflow_key=definition.key,
        enabled=stored.enabled,
        email_subject=stored.email_subject or definition.email_defaults.subject,
        email_body=stored.email_body or definition.email_defaults.body,
        template_version=stored.template_version,
        is_customized=True,
    )


def _require_text(value: str, field: str) -> str:
    if not value.strip():
        raise ValidationException(f"{field} cannot be empty", field=field)
    return value


class WorkflowConfigService:
    """Lists workflows with their tenant config, toggles them, and edits templates."""

    def __init__(
        self,
        config_repo: IWorkflowConfigRepository,
        run_repo: IWorkflowRunRepository,
    ) -> None:
        self.config_repo = config_repo
        self.run_repo = run_repo

    async def list_workflows(self, organization_id: str) -> list[WorkflowOverview]:
        """Return every catalog workflow with the tenant's effective config (catalog order)."""
        stored = {
            config.workflow_key: config
            for config in await self.config_repo.list_by_organization(organization_id)
        }
        return [
            WorkflowOverview(
                definition=definition,
                config=resolve_workflow_config(definition, stored.get(definition.key.value)),
            )
            for definition in PREBUILT_WORKFLOWS
        ]

    async def get_workflow(self, organization_id: str, workflow_key: str) -> WorkflowOverview:
        """Return one workflow with its effective config. Raises UnknownWorkflowException."""
        definition = get_workflow_definition(workflow_key)
        stored = await self.config_repo.get(organization_id, definition.key.value)
        return WorkflowOverview(
            definition=definition, config=resolve_workflow_config(definition, stored)
        )

    async def set_enabled(
        self,
        organization_id: str,
        workflow_key: str,
        enabled: bool,
        updated_by_user_id: str | None = None,
    ) -> ResolvedWorkflowConfig:
        """Enable or disable a workflow for the tenant, keeping its templates."""
        definition = get_workflow_definition(workflow_key)
        current = resolve_workflow_config(
            definition, await self.config_repo.get(organization_id, definition.key.value)
        )
        saved = await self.config_repo.save(
            organization_id,
            definition.key.value,
            enabled=enabled,
            email_subject=current.email_subject,
            email_body=current.email_body,
            template_version=current.template_version,
            updated_by_user_id=updated_by_user_id,
        )
        return resolve_workflow_config(definition, saved)

    async def update_template(
        self,
        organization_id: str,
        workflow_key: str,
        *,
        email_subject: str | None,
        email_body: str | None,
        updated_by_user_id: str | None = None,
    ) -> ResolvedWorkflowConfig:
        """Store new subject/body templates and bump template_version.

        None for either value resets it to the catalog default. Blank strings
        raise ValidationException.
        """
        definition = get_workflow_definition(workflow_key)
        stored = await self.config_repo.get(organization_id, definition.key.value)
        subject = (
            definition.email_defaults.subject
            if email_subject is None
            else _require_text(email_subject, "email_subject")
        )
        body = (
            definition.email_defaults.body
            if email_body is None
            else _require_text(email_body, "email_body")
        )
        saved = await self.config_repo.save(
            organization_id,
            definition.key.value,
            enabled=stored.enabled if stored else False,
            email_subject=subject,
            email_body=body,
            template_version=(
                stored.template_version + 1 if stored else DEFAULT_TEMPLATE_VERSION
            ),
            updated_by_user_id=updated_by_user_id,
        )
        return resolve_workflow_config(definition, saved)

    async def list_runs(
        self,
        organization_id: str,
        workflow_key: str | None = None,
        limit: int = 50,
    ) -> list[WorkflowRunResult]:
        """Return the tenant's run history, newest first."""
        if limit < 1 or limit > MAX_RUNS_LIMIT:
            raise ValidationException(
                f"limit must be between 1 and {MAX_RUNS_LIMIT}", field="limit"
            )
        if workflow_key is not None:
            workflow_key = get_workflow_definition(workflow_key).key.value
        return await self.run_repo.list_runs(organization_id, workflow_key, limit)
