import re
import uuid
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError

from siteforge.extensions import db
from siteforge.models.project import Project
from siteforge.domain.status import ProjectStatus
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional


def generate_hostname(label: Optional[str] = None) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (label or "site").lower()).strip("-") or "site"
    suffix = current_app.config["GENERATED_HOSTNAME_SUFFIX"]
    return f"{slug[:40]}-{uuid.uuid4().hex[:8]}.{suffix}"


def create_project(
    *,
    tenant_id: str,
    hostname: Optional[str] = None,
) -> Project:
    """
    Create a website project in CREATED state.

    The hostname is fixed for the life of the project.
    """
    project = Project()
    project.tenant_id = tenant_id
    project.generated_hostname = hostname or generate_hostname()
    project.status = ProjectStatus.CREATED.value
    project.stage_artifacts = {}

    try:
        with transactional():
            db.session.add(project)
            db.session.flush()

            log_action(
                action="project.create",
                entity_type="project",
                entity_id=project.id,
                payload={"hostname": project.generated_hostname},
            )

        return project

    except IntegrityError as exc:
        raise ValueError("A project with this hostname already exists") from exc
