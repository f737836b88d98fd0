# siteforge/application/websites/start_pipeline.py
from typing import Any, Dict

import requests
from flask import current_app

from siteforge.domain.status import ProjectStatus, NON_POLLING_STATUSES
from siteforge.domain.invariants.exceptions import IllegalTransition
from siteforge.utils.audit import log_action
from siteforge.extensions import db
from .locking import lock_project


class PipelineTriggerError(Exception):
    """The worker webhook did not accept the trigger."""


def start_pipeline(
    *,
    tenant_id: str,
    project_id: str,
) -> Dict[str, Any]:
    """
    Ask the external worker to (re)start the generation pipeline.

    Safe to repeat: the worker keys its run on the project id and reports
    progress through report_project_status.
    """
    project = lock_project(tenant_id, project_id)
    # Nothing to hold the lock for while calling out
    db.session.commit()

    if ProjectStatus(project.status) in NON_POLLING_STATUSES:
        raise IllegalTransition(
            f"Pipeline cannot be started from {project.status}"
        )

    payload = {
        "projectId": project.id,
        "placeId": project.selected_place_id,
        "websiteUrl": project.selected_website_url,
        "templateId": project.template_id,
        "primaryColor": project.primary_color,
        "accentColor": project.accent_color,
        **(project.step_gbp_scrape or {}),
    }

    webhook_url = current_app.config.get("PIPELINE_WEBHOOK_URL")
    if not webhook_url:
        current_app.logger.warning(
            f"PIPELINE_WEBHOOK_URL not configured; pipeline for {project.id} not triggered"
        )
        return {"triggered": False, "project_id": project.id}

    try:
        response = requests.post(
            webhook_url,
            json=payload,
            timeout=current_app.config["WEBHOOK_TIMEOUT_SECONDS"],
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        current_app.logger.error(f"Pipeline webhook failed for {project.id}: {exc}")
        raise PipelineTriggerError(str(exc)) from exc

    log_action(
        action="project.start_pipeline",
        entity_type="project",
        entity_id=project.id,
        payload={"status": project.status},
    )
    db.session.commit()

    return {"triggered": True, "project_id": project.id}
