# siteforge/api/v1/websites.py
from flask import g, request, jsonify
from siteforge.extensions import db
from siteforge.models.project import Project
from siteforge.models.template import Template
from siteforge.domain.status import PIPELINE_STAGES
from siteforge.application.websites.create_project import create_project
from siteforge.application.websites.delete_project import delete_project
from siteforge.application.websites.select_business import select_business
from siteforge.application.websites.report_status import report_project_status
from siteforge.application.websites.start_pipeline import start_pipeline
from siteforge.normalizers.project import normalize_project, normalize_template
from siteforge.normalizers.pagination import normalize_pagination
from siteforge.utils.decorators import feature_enabled
from siteforge.utils.pagination import paginate_offset
from . import v1_bp


# ------------------------
# Projects
# ------------------------

@v1_bp.route("/websites", methods=["GET"])
@feature_enabled("website_builder")
def list_websites():
    tenant = g.current_tenant

    status = request.args.get("status")
    page_num = request.args.get("page", 1, type=int)
    limit = min(request.args.get("limit", 20, type=int), 100)

    query = Project.query.filter_by(tenant_id=tenant.id)
    if status:
        query = query.filter_by(status=status)

    items, meta = paginate_offset(
        query.order_by(Project.created_at.desc()), page=page_num, limit=limit
    )

    return jsonify(normalize_pagination(items, normalize_project, meta))


@v1_bp.route("/websites/statuses", methods=["GET"])
def list_statuses():
    return jsonify({
        "success": True,
        "statuses": [s.value for s in PIPELINE_STAGES],
    })


@v1_bp.route("/websites", methods=["POST"])
@feature_enabled("website_builder")
def create_website():
    data = request.get_json(silent=True) or {}

    project = create_project(
        tenant_id=g.current_tenant.id,
        hostname=data.get("hostname"),
    )

    return jsonify({"success": True, "data": normalize_project(project)}), 201


@v1_bp.route("/websites/<project_id>", methods=["GET"])
@feature_enabled("website_builder")
def get_website(project_id):
    project = Project.query.filter_by(
        id=project_id,
        tenant_id=g.current_tenant.id,
    ).first_or_404()

    return jsonify({
        "success": True,
        "data": normalize_project(project, include_pages=True),
    })


@v1_bp.route("/websites/<project_id>", methods=["DELETE"])
@feature_enabled("website_builder")
def delete_website(project_id):
    delete_project(tenant_id=g.current_tenant.id, project_id=project_id)

    return jsonify({"success": True, "message": "Website deleted"}), 200


# ------------------------
# Pipeline
# ------------------------

@v1_bp.route("/websites/<project_id>/selection", methods=["POST"])
@feature_enabled("website_builder")
def select_website_business(project_id):
    data = request.get_json(silent=True) or {}

    project = select_business(
        tenant_id=g.current_tenant.id,
        project_id=project_id,
        data=data,
    )

    return jsonify({"success": True, "data": normalize_project(project)}), 200


@v1_bp.route("/websites/<project_id>/start-pipeline", methods=["POST"])
@feature_enabled("website_builder")
def start_website_pipeline(project_id):
    result = start_pipeline(tenant_id=g.current_tenant.id, project_id=project_id)

    return jsonify({"success": True, **result}), 202


@v1_bp.route("/websites/<project_id>/status", methods=["PATCH"])
def report_website_status(project_id):
    """Progress callback for the pipeline worker."""
    data = request.get_json(silent=True) or {}

    if not data.get("status"):
        return jsonify({"error": "BadRequest", "message": "status is required"}), 400

    project = report_project_status(
        tenant_id=g.current_tenant.id,
        project_id=project_id,
        status=data["status"],
        artifacts=data.get("artifacts"),
    )

    return jsonify({"success": True, "data": normalize_project(project)}), 200


# ------------------------
# Templates
# ------------------------

@v1_bp.route("/templates/<template_id>", methods=["GET"])
def get_template(template_id):
    template = db.get_or_404(Template, template_id)

    return jsonify({"success": True, "data": normalize_template(template)})
