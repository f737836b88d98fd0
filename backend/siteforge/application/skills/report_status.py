from typing import Any, Optional

from siteforge.models.skill import Skill
from siteforge.domain.status import SkillStatus
from siteforge.domain.invariants.exceptions import IllegalTransition
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from .start_generation import lock_skill

# The worker only reports outcomes of a running generation
ALLOWED_REPORTS = {
    SkillStatus.GENERATING: {SkillStatus.GENERATING, SkillStatus.READY, SkillStatus.FAILED},
}


def report_skill_status(
    *,
    tenant_id: str,
    skill_id: str,
    status: str,
    artifact: Optional[Any] = None,
    error: Optional[str] = None,
) -> Skill:
    try:
        target = SkillStatus(status)
    except ValueError as exc:
        raise ValueError(f"Unknown skill status: {status!r}") from exc

    skill = lock_skill(tenant_id, skill_id)

    with transactional():
        current = SkillStatus(skill.status)
        if current == target:
            return skill  # duplicate delivery

        if target not in ALLOWED_REPORTS.get(current, set()):
            raise IllegalTransition(
                f"Illegal skill transition: {current.value} → {target.value}"
            )

        skill.status = target.value
        if target == SkillStatus.READY:
            skill.artifact = artifact
        if target == SkillStatus.FAILED:
            skill.error = error or "Generation failed"

        log_action(
            action="skill.status",
            entity_type="skill",
            entity_id=skill.id,
            payload={"from": current.value, "to": target.value},
        )

    return skill
