from flask import g, request, jsonify
from siteforge.models.skill import Skill
from siteforge.application.skills.start_generation import start_skill_generation
from siteforge.application.skills.report_status import report_skill_status
from siteforge.normalizers.skill import normalize_skill
from siteforge.utils.decorators import feature_enabled
from . import v1_bp


@v1_bp.route("/skills/<skill_id>", methods=["GET"])
@feature_enabled("skills")
def get_skill(skill_id):
    skill = Skill.query.filter_by(
        id=skill_id,
        tenant_id=g.current_tenant.id,
    ).first_or_404()

    return jsonify({"success": True, "data": normalize_skill(skill)})


@v1_bp.route("/skills/<skill_id>/generate", methods=["POST"])
@feature_enabled("skills")
def generate_skill(skill_id):
    result = start_skill_generation(tenant_id=g.current_tenant.id, skill_id=skill_id)

    return jsonify({
        "success": True,
        "triggered": result["triggered"],
        "data": normalize_skill(result["skill"]),
    }), 202


@v1_bp.route("/skills/<skill_id>", methods=["PATCH"])
def report_skill(skill_id):
    """Progress callback for the generation worker."""
    data = request.get_json(silent=True) or {}

    if not data.get("status"):
        return jsonify({"error": "BadRequest", "message": "status is required"}), 400

    skill = report_skill_status(
        tenant_id=g.current_tenant.id,
        skill_id=skill_id,
        status=data["status"],
        artifact=data.get("artifact"),
        error=data.get("error"),
    )

    return jsonify({"success": True, "data": normalize_skill(skill)}), 200
