# siteforge/normalizers/audit.py
from __future__ import annotations

from typing import Any, Dict, Optional

from siteforge.models.audit_log import AuditLog
from .timestamps import iso

# Payload keys the trail surfaces at the top level, per entity type.
SUBJECT_KEYS = {
    "page": ("path", "version", "from_version", "demoted"),
    "project": ("hostname", "place_id", "template_id"),
    "skill": (),
}


def _transition(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    if "to" not in payload:
        return None
    return {"from": payload.get("from"), "to": payload["to"]}


def normalize_audit_log(log: AuditLog) -> Dict[str, Any]:
    """
    One lifecycle event of the trail.

    `action` is "<entity>.<event>" (e.g. "page.publish"); `event` is the
    part after the dot. Status changes carry a `transition`, page events
    the path and version they touched.
    """
    payload = log.payload or {}
    _, _, event = log.action.partition(".")

    entry = {
        "id": log.id,
        "actor_id": log.actor_id,
        "action": log.action,
        "event": event or log.action,
        "entity_type": log.entity_type,
        "entity_id": log.entity_id,
        "transition": _transition(payload),
        "payload": payload,
        "created_at": iso(log.created_at),
    }
    for key in SUBJECT_KEYS.get(log.entity_type, ()):
        if key in payload:
            entry[key] = payload[key]
    return entry
