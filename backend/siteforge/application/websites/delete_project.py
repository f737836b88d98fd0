from siteforge.extensions import db
from siteforge.models.page import PageSequence
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from .locking import lock_project


def delete_project(
    *,
    tenant_id: str,
    project_id: str,
) -> None:
    """
    Hard-delete a project with every page version.

    The only way out of READY.
    """
    project = lock_project(tenant_id, project_id)

    with transactional():
        PageSequence.query.filter_by(project_id=project.id).delete(
            synchronize_session=False
        )

        # Pages go through the delete-orphan cascade
        db.session.delete(project)

        log_action(
            action="project.delete",
            entity_type="project",
            entity_id=project_id,
            payload={"hostname": project.generated_hostname},
        )
