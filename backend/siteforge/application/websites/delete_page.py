from siteforge.extensions import db
from siteforge.domain.invariants.page import assert_deletable
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from siteforge.domain.invariants.page import normalize_path
from .locking import lock_page, lock_path, lock_project


def delete_version(
    *,
    tenant_id: str,
    page_id: str,
) -> None:
    """
    Delete one version row.

    Refused for the published row and for the last row of a path.
    """
    page, siblings = lock_page(tenant_id, page_id)

    with transactional():
        assert_deletable(page, siblings)

        db.session.delete(page)

        log_action(
            action="page.delete",
            entity_type="page",
            entity_id=page_id,
            payload={"path": page.path, "version": page.version},
        )


def delete_all_versions(
    *,
    tenant_id: str,
    project_id: str,
    path: str,
) -> int:
    """
    Remove every version of a path. The version sequence is kept.
    """
    path = normalize_path(path)
    project = lock_project(tenant_id, project_id)

    with transactional():
        pages = lock_path(tenant_id, project.id, path)
        for page in pages:
            db.session.delete(page)

        log_action(
            action="page.delete_all",
            entity_type="project",
            entity_id=project.id,
            payload={"path": path, "versions": [p.version for p in pages]},
        )

    return len(pages)
