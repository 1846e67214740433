from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from services.errors import AuthError

logger = logging.getLogger(__name__)

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    429: "TOO_MANY_REQUESTS",
}


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Typed auth/service errors carry their own status and code
    @app.errorhandler(AuthError)
    def handle_auth_error(err: AuthError):
        if err.status_code >= 500:
            logger.error("%s: %s", err.__class__.__name__, err.message)
        return error_response(err.code, err.message, err.status_code, details=err.details)

    # 404 Not Found
    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", 404)

    # Marshmallow validation errors map to 400 with field-level details
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 400, details=err.messages)

    # Integrity errors (unique constraints, FK violations, check constraints)
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        lower_msg = message.lower()
        if current_app and current_app.debug:
            logger.exception("Integrity error", exc_info=err)
        # Heuristics: tailor the status
        if "unique constraint" in lower_msg or "unique violation" in lower_msg:
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        if "foreign key constraint" in lower_msg or "foreign key mismatch" in lower_msg:
            return error_response("BAD_REQUEST", "Foreign key constraint failed.", 400)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions (abort(), 405, Flask-Limiter's 429) map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or 400
        return error_response(HTTP_ERROR_CODES.get(status, "HTTP_ERROR"), err.description, status)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        details = None
        # In dev, include exception details to speed up debugging
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
