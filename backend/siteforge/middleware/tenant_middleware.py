from flask import request, g, jsonify
from siteforge.models.tenant import Tenant

# Paths served without a tenant
PUBLIC_PREFIXES = ("/api/v1/health", "/openapi", "/swagger")


def tenant_middleware(app):
    @app.before_request
    def load_tenant():
        if request.path.startswith(PUBLIC_PREFIXES):
            return None

        tenant_id = request.headers.get('X-Tenant-ID')
        if not tenant_id:
            return jsonify({"error": "TenantMissing", "message": "X-Tenant-ID header is missing"}), 400

        tenant = Tenant.query.filter_by(id=tenant_id, is_active=True).first()
        if not tenant:
            return jsonify({"error": "TenantNotFound", "message": "Invalid tenant"}), 404

        # Attach tenant and acting user to global context
        g.current_tenant = tenant
        g.current_actor_id = request.headers.get('X-Actor-ID')
