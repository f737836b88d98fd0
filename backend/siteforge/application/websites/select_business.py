# siteforge/application/websites/select_business.py
from typing import Any, Dict

from siteforge.extensions import db
from siteforge.models.project import Project
from siteforge.models.template import Template
from siteforge.domain.status import ProjectStatus
from siteforge.domain.invariants.exceptions import TemplateNotReady
from siteforge.domain.lifecycle.project import assert_selectable
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from .locking import lock_project

BUSINESS_PROFILE_FIELDS = (
    "name",
    "formattedAddress",
    "phone",
    "rating",
    "reviewCount",
    "category",
)


def select_business(
    *,
    tenant_id: str,
    project_id: str,
    data: Dict[str, Any],
) -> Project:
    """
    Capture the project's configuration and move it to GBP_SELECTED.

    Responsibilities:
    - lifecycle guard (only from CREATED)
    - template guard (template with at least one page)
    - persist configuration once
    - audit logging
    """
    place_id = data.get("place_id")
    template_id = data.get("template_id")

    if not place_id:
        raise ValueError("place_id is required")

    project = lock_project(tenant_id, project_id)

    with transactional():
        assert_selectable(project.status)

        template = db.session.get(Template, template_id) if template_id else None
        if template is None or not template.is_active:
            raise TemplateNotReady(f"Template {template_id!r} does not exist")
        if not template.pages:
            raise TemplateNotReady(f"Template {template.name!r} has no pages")

        profile = data.get("business") or {}

        project.selected_place_id = place_id
        project.selected_website_url = data.get("website_url") or None
        project.template_id = template.id
        project.primary_color = data.get("primary_color")
        project.accent_color = data.get("accent_color")
        project.step_gbp_scrape = {
            field: profile.get(field) for field in BUSINESS_PROFILE_FIELDS
        } | {"websiteUri": project.selected_website_url}
        project.status = ProjectStatus.GBP_SELECTED.value

        log_action(
            action="project.select",
            entity_type="project",
            entity_id=project.id,
            payload={"place_id": place_id, "template_id": template.id},
        )

    return project
