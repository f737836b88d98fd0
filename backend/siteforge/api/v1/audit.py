from flask import g, request, jsonify
from siteforge.models.audit_log import AuditLog
from siteforge.normalizers.audit import normalize_audit_log
from siteforge.normalizers.pagination import normalize_pagination
from siteforge.utils.pagination import paginate_cursor
from . import v1_bp


@v1_bp.route("/audit", methods=["GET"])
def list_audit_logs():
    tenant = g.current_tenant

    limit = min(request.args.get("limit", 20, type=int), 100)

    query = AuditLog.query.filter(AuditLog.tenant_id == tenant.id)

    # Optional filters
    if action := request.args.get("action"):
        query = query.filter(AuditLog.action == action)

    if entity_type := request.args.get("entity_type"):
        query = query.filter(AuditLog.entity_type == entity_type)

    if entity_id := request.args.get("entity_id"):
        query = query.filter(AuditLog.entity_id == entity_id)

    logs, meta = paginate_cursor(
        query,
        model=AuditLog,
        cursor=request.args.get("cursor"),
        limit=limit,
    )

    return jsonify(normalize_pagination(logs, normalize_audit_log, meta)), 200
