from flask import g
from siteforge.extensions import db
from siteforge.models.audit_log import AuditLog
from typing import Optional

def log_action(
    *,
    action: str,
    entity_type: str,
    entity_id: Optional[str],
    payload: dict | None = None
):
    tenant = getattr(g, "current_tenant", None)
    if tenant is None:
        return  # Skip logging outside a tenant-scoped request

    log = AuditLog()

    log.actor_id = getattr(g, "current_actor_id", None)
    log.tenant_id = tenant.id
    log.action = action
    log.entity_type = entity_type
    log.entity_id = entity_id
    log.payload = payload or {}

    db.session.add(log)
