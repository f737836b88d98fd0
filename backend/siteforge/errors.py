from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from siteforge.domain.invariants.exceptions import GuardViolation, InvariantViolation
from siteforge.application.websites.start_pipeline import PipelineTriggerError
from siteforge.services.element_editor import EditorUnavailable, EditorResponseError


def _error(name, message, status_code):
    response = jsonify({
        "error": name,
        "message": message
    })
    response.status_code = status_code
    return response


def register_error_handlers(app):
    # Guard violations carry their class name so clients can re-raise them
    @app.errorhandler(GuardViolation)
    def handle_guard_violation(error):
        current_app.logger.info("Guard %s rejected request: %s", error.code, error)
        return _error(error.code, str(error), 409)

    @app.errorhandler(InvariantViolation)
    def handle_invariant_violation(error):
        return _error("InvariantViolation", str(error), 400)

    @app.errorhandler(ValueError)
    def handle_value_error(error):
        return _error("BadRequest", str(error), 400)

    @app.errorhandler(PipelineTriggerError)
    def handle_pipeline_trigger(error):
        current_app.logger.warning("Pipeline trigger failed: %s", error)
        return _error("PipelineTriggerFailed", str(error), 502)

    @app.errorhandler(EditorUnavailable)
    def handle_editor_unavailable(error):
        return _error("EditorUnavailable", str(error), 503)

    @app.errorhandler(EditorResponseError)
    def handle_editor_response(error):
        current_app.logger.warning("Editor returned an unusable reply: %s", error)
        return _error("EditorResponseError", str(error), 502)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        return _error(error.name.replace(" ", ""), error.description, error.code)
