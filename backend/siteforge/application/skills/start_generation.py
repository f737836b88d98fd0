from typing import Any, Dict

import requests
from flask import abort, current_app
from sqlalchemy import select

from siteforge.extensions import db
from siteforge.models.skill import Skill
from siteforge.domain.status import SkillStatus
from siteforge.domain.invariants.exceptions import IllegalTransition
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional


def lock_skill(tenant_id: str, skill_id: str) -> Skill:
    skill = db.session.execute(
        select(Skill)
        .where(Skill.id == skill_id, Skill.tenant_id == tenant_id)
        .with_for_update()
    ).scalar_one_or_none()

    if not skill:
        abort(404, description="Skill not found")

    return skill


def start_skill_generation(
    *,
    tenant_id: str,
    skill_id: str,
) -> Dict[str, Any]:
    """
    Mark a skill as generating and hand it to the generation worker.

    Calling it again while generating re-sends the trigger without changing
    state.
    """
    skill = lock_skill(tenant_id, skill_id)

    with transactional():
        if skill.status == SkillStatus.GENERATING:
            pass
        elif skill.status in (SkillStatus.DRAFT, SkillStatus.READY, SkillStatus.FAILED):
            skill.status = SkillStatus.GENERATING.value
            skill.error = None
            log_action(
                action="skill.status",
                entity_type="skill",
                entity_id=skill.id,
                payload={"to": SkillStatus.GENERATING.value},
            )
        else:
            raise IllegalTransition(f"Unknown skill status {skill.status!r}")

    webhook_url = current_app.config.get("SKILL_WEBHOOK_URL")
    if not webhook_url:
        current_app.logger.warning(
            f"SKILL_WEBHOOK_URL not configured; skill {skill.id} left generating"
        )
        return {"triggered": False, "skill": skill}

    try:
        requests.post(
            webhook_url,
            json={"skillId": skill.id, "name": skill.name, "definition": skill.definition},
            timeout=current_app.config["WEBHOOK_TIMEOUT_SECONDS"],
        ).raise_for_status()
    except requests.RequestException as exc:
        # The poller keeps watching; a later retry re-sends the trigger
        current_app.logger.error(f"Skill webhook failed for {skill.id}: {exc}")
        return {"triggered": False, "skill": skill}

    return {"triggered": True, "skill": skill}
