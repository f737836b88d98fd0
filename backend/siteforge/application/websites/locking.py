from typing import List

from flask import abort
from sqlalchemy import select

from siteforge.extensions import db
from siteforge.models.page import Page
from siteforge.models.project import Project


def lock_project(tenant_id: str, project_id: str) -> Project:
    project = db.session.execute(
        select(Project)
        .where(Project.id == project_id, Project.tenant_id == tenant_id)
        .with_for_update()
    ).scalar_one_or_none()

    if not project:
        abort(404, description="Project not found")

    return project


def lock_path(tenant_id: str, project_id: str, path: str) -> List[Page]:
    """Row-lock every version of a path, oldest first."""
    return list(
        db.session.execute(
            select(Page)
            .where(
                Page.tenant_id == tenant_id,
                Page.project_id == project_id,
                Page.path == path,
            )
            .order_by(Page.version.asc())
            .with_for_update()
        ).scalars()
    )


def lock_page(tenant_id: str, page_id: str) -> tuple[Page, List[Page]]:
    """
    Lock a page together with all of its siblings.

    Returns (page, siblings) where siblings includes the page itself.
    """
    page = db.session.execute(
        select(Page).where(Page.id == page_id, Page.tenant_id == tenant_id)
    ).scalar_one_or_none()

    if not page:
        abort(404, description="Page not found")

    siblings = lock_path(tenant_id, page.project_id, page.path)
    page = next((p for p in siblings if p.id == page_id), None)
    if page is None:
        # Deleted between the lookup and the lock
        abort(404, description="Page not found")

    return page, siblings
