"""Inspect and configure prebuilt workflows for one organization.

Usage:
    python -m scripts.manage_workflows list <organization_id>
    python -m scripts.manage_workflows enable <organization_id> <workflow_key> [user_id]
    python -m scripts.manage_workflows disable <organization_id> <workflow_key> [user_id]
    python -m scripts.manage_workflows runs <organization_id> [workflow_key] [limit]
Requires Postgres (DATABASE_URL).
"""

import asyncio
import json
import sys

import opsflow.infrastructure.persistence.database as database
from opsflow.domain.exceptions import OpsflowException
from opsflow.infrastructure.composition import build_workflow_config_service
from opsflow.schemas import WorkflowRunOut
from opsflow.shared.telemetry import setup_logging

_COMMANDS = ("list", "enable", "disable", "runs")


def _usage() -> None:
    print(__doc__, file=sys.stderr)
    sys.exit(2)


async def _run(command: str, args: list[str]) -> None:
    writes = command in ("enable", "disable")
    session_cm = database.get_db_transactional() if writes else database.get_db()
    async with session_cm as session:
        service = build_workflow_config_service(session)
        organization_id = args[0]
        if command == "list":
            for overview in await service.list_workflows(organization_id):
                state = "enabled" if overview.config.enabled else "disabled"
                marker = " (customized)" if overview.config.is_customized else ""
                key = overview.definition.key.value
                print(f"{key:20} {state}{marker}  {overview.definition.title}")
        elif writes:
            if len(args) < 2:
                _usage()
            config = await service.set_enabled(
                organization_id,
                args[1],
                command == "enable",
                updated_by_user_id=args[2] if len(args) > 2 else None,
            )
            print(f"{config.workflow_key.value}: enabled={config.enabled}")
        else:
            workflow_key = args[1] if len(args) > 1 and args[1] else None
            limit = int(args[2]) if len(args) > 2 else 50
            runs = await service.list_runs(organization_id, workflow_key, limit)
            out = [WorkflowRunOut.model_validate(r).model_dump(mode="json") for r in runs]
            print(json.dumps(out, indent=2))


async def main() -> None:
    setup_logging()
    if len(sys.argv) < 3 or sys.argv[1] not in _COMMANDS:
        _usage()
    try:
        await _run(sys.argv[1], sys.argv[2:])
    except (OpsflowException, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        await database.dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
