from typing import Any, Dict, Optional

from siteforge.models.project import Project
from siteforge.domain.status import ProjectStatus
from siteforge.domain.lifecycle.project import assert_project_transition
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from .locking import lock_project


def report_project_status(
    *,
    tenant_id: str,
    project_id: str,
    status: str,
    artifacts: Optional[Dict[str, Any]] = None,
) -> Project:
    """
    Record a stage reached by the external worker.

    Repeating the current stage is a no-op apart from merging artifacts, so
    the worker may deliver at-least-once.
    """
    try:
        target = ProjectStatus(status)
    except ValueError as exc:
        raise ValueError(f"Unknown project status: {status!r}") from exc

    project = lock_project(tenant_id, project_id)

    with transactional():
        assert_project_transition(from_status=project.status, to_status=target)

        previous = project.status
        project.status = target.value

        if artifacts:
            merged = dict(project.stage_artifacts or {})
            merged[target.value] = artifacts
            project.stage_artifacts = merged

        if previous != project.status:
            log_action(
                action="project.status",
                entity_type="project",
                entity_id=project.id,
                payload={"from": previous, "to": project.status},
            )

    return project
