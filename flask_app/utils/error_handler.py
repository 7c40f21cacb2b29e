# flask_app/utils/error_handler.py
"""
JSON error responses for the API.
"""

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

from flask_app.models import db
from flask_app.services.errors import ContactServiceError, ErrorKind


def error_response(message, status_code, kind=None, details=None):
    payload = {"message": message}
    if kind is not None:
        payload["error"] = kind.value if isinstance(kind, ErrorKind) else kind
    if details:
        payload["details"] = details
    return jsonify(payload), status_code


def form_error_response(form):
    """400 response listing WTForms field errors."""
    return error_response(
        "Invalid request data.",
        400,
        ErrorKind.VALIDATION_ERROR,
        details={name: list(messages) for name, messages in form.errors.items()},
    )


def init_error_handlers(app):
    """Register JSON handlers for service errors and common HTTP errors"""

    @app.errorhandler(ContactServiceError)
    def handle_service_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            current_app.logger.error(f"{error.kind.value}: {error.message}", exc_info=error.__cause__ is not None)
        else:
            current_app.logger.warning(f"{error.kind.value}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def not_found_error(error):
        return error_response("Resource not found.", 404, ErrorKind.NOT_FOUND)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response("Method not allowed.", 405)

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        current_app.logger.error(f"Internal server error: {str(error)}")
        return error_response("Internal server error.", 500)

    @app.errorhandler(HTTPException)
    def http_error(error):
        return error_response(error.description or error.name, error.code or 500)
