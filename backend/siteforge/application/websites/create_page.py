from typing import Any, Dict, List, Optional

from siteforge.extensions import db
from siteforge.models.page import Page
from siteforge.domain.status import PageStatus
from siteforge.domain.invariants.page import assert_sections, normalize_path
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from siteforge.utils.versioning import next_version
from .locking import lock_path, lock_project


def create_page(
    *,
    tenant_id: str,
    project_id: str,
    path: str,
    sections: Optional[List[Dict[str, Any]]] = None,
) -> Page:
    """
    Create the first version of a new path, as a draft.

    Edge cases handled:
    - Missing / blank path
    - Path that already has versions
    - Invariant violations in sections
    """
    path = normalize_path(path)
    sections = sections or []
    assert_sections(sections)

    project = lock_project(tenant_id, project_id)

    with transactional():
        if lock_path(tenant_id, project.id, path):
            raise ValueError(f"Page '{path}' already exists")

        page = Page()
        page.tenant_id = tenant_id
        page.project_id = project.id
        page.path = path
        page.version = next_version(project.id, path)
        page.status = PageStatus.DRAFT.value
        page.sections = sections

        db.session.add(page)
        db.session.flush()

        log_action(
            action="page.create",
            entity_type="page",
            entity_id=page.id,
            payload={"path": path, "version": page.version},
        )

    return page
