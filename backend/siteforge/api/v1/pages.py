# siteforge/api/v1/pages.py
from flask import g, request, jsonify
from siteforge.models.page import Page
from siteforge.models.project import Project
from siteforge.application.websites.create_page import create_page
from siteforge.domain.invariants.page import normalize_path
from siteforge.application.websites.create_draft import create_draft_from_published
from siteforge.application.websites.save_draft import save_draft
from siteforge.application.websites.publish_page import publish_page
from siteforge.application.websites.delete_page import delete_version, delete_all_versions
from siteforge.application.websites.restore_page import restore_page
from siteforge.application.websites.edit_element import edit_page_element
from siteforge.normalizers.page import normalize_page, normalize_versions
from siteforge.utils.decorators import feature_enabled
from . import v1_bp


# ------------------------
# Paths (all versions of a page)
# ------------------------

@v1_bp.route("/websites/<project_id>/pages", methods=["GET"])
@feature_enabled("website_builder")
def list_page_versions(project_id):
    tenant = g.current_tenant
    Project.query.filter_by(id=project_id, tenant_id=tenant.id).first_or_404()

    query = Page.query.filter_by(tenant_id=tenant.id, project_id=project_id)
    if request.args.get("path"):
        query = query.filter_by(path=normalize_path(request.args["path"]))

    return jsonify({"success": True, "versions": normalize_versions(query.all())})


@v1_bp.route("/websites/<project_id>/pages", methods=["POST"])
@feature_enabled("website_builder")
def create_website_page(project_id):
    data = request.get_json(silent=True) or {}

    page = create_page(
        tenant_id=g.current_tenant.id,
        project_id=project_id,
        path=data.get("path"),
        sections=data.get("sections"),
    )

    return jsonify({"success": True, "data": normalize_page(page)}), 201


@v1_bp.route("/websites/<project_id>/pages", methods=["DELETE"])
@feature_enabled("website_builder")
def delete_website_path(project_id):
    removed = delete_all_versions(
        tenant_id=g.current_tenant.id,
        project_id=project_id,
        path=request.args.get("path"),
    )

    return jsonify({"success": True, "deleted": removed}), 200


# ------------------------
# Versions
# ------------------------

@v1_bp.route("/pages/<page_id>", methods=["GET"])
@feature_enabled("website_builder")
def get_page(page_id):
    page = Page.query.filter_by(
        id=page_id,
        tenant_id=g.current_tenant.id,
    ).first_or_404()

    return jsonify({"success": True, "data": normalize_page(page)})


@v1_bp.route("/pages/<page_id>/draft", methods=["POST"])
@feature_enabled("website_builder")
def create_page_draft(page_id):
    draft = create_draft_from_published(tenant_id=g.current_tenant.id, page_id=page_id)

    return jsonify({"success": True, "data": normalize_page(draft)}), 200


@v1_bp.route("/pages/<page_id>", methods=["PUT"])
@feature_enabled("website_builder")
def save_page_draft(page_id):
    data = request.get_json(silent=True) or {}

    page = save_draft(
        tenant_id=g.current_tenant.id,
        page_id=page_id,
        sections=data.get("sections", []),
        edit_chat_history=data.get("edit_chat_history"),
    )

    return jsonify({"success": True, "data": normalize_page(page)}), 200


@v1_bp.route("/pages/<page_id>/publish", methods=["POST"])
@feature_enabled("website_builder")
def publish_page_version(page_id):
    result = publish_page(tenant_id=g.current_tenant.id, page_id=page_id)

    return jsonify({
        "success": True,
        "data": normalize_page(result["page"]),
        "demoted": [normalize_page(p, include_content=False) for p in result["demoted"]],
    }), 200


@v1_bp.route("/pages/<page_id>", methods=["DELETE"])
@feature_enabled("website_builder")
def delete_page_version(page_id):
    delete_version(tenant_id=g.current_tenant.id, page_id=page_id)

    return jsonify({"success": True, "message": "Version deleted"}), 200


@v1_bp.route("/pages/<page_id>/restore", methods=["POST"])
@feature_enabled("website_builder")
def restore_page_version(page_id):
    draft = restore_page(tenant_id=g.current_tenant.id, page_id=page_id)

    return jsonify({"success": True, "data": normalize_page(draft)}), 201


@v1_bp.route("/pages/<page_id>/edit", methods=["POST"])
@feature_enabled("website_builder")
@feature_enabled("ai_assistant")
def edit_page_component(page_id):
    data = request.get_json(silent=True) or {}

    result = edit_page_element(
        tenant_id=g.current_tenant.id,
        page_id=page_id,
        data=data,
    )

    return jsonify({"success": True, **result}), 200
