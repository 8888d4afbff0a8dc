from flask import jsonify, current_app
from werkzeug.exceptions import HTTPException
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError
import logging

from utils.exceptions import AuthError, StorageError

logger = logging.getLogger(__name__)


def error_response(error: str, message: str, status: int, details: dict | None = None):
    payload = {"error": error, "message": message, "status": status}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def register_error_handlers(app):
    # Auth taxonomy: every AuthError knows its own status and code
    @app.errorhandler(AuthError)
    def handle_auth_error(err: AuthError):
        if isinstance(err, StorageError):
            logger.warning("Storage unavailable: %s", err.message)
        elif err.status >= 500:
            logger.error("%s: %s", err.code, err.message)
        response, status = error_response(err.code, err.message, err.status)
        if isinstance(err, StorageError):
            response.headers["Retry-After"] = "1"
        return response, status

    # Marshmallow validation errors map to 422
    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        # err.messages contains field-level details
        return error_response("VALIDATION_ERROR", "Invalid input", 422, details=err.messages)

    # Unique constraint races that slipped past the service checks
    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        message = str(getattr(err, "orig", err))
        if current_app and current_app.debug:
            logger.exception("Integrity error", exc_info=err)
        if "unique" in message.lower():
            return error_response("CONFLICT", "Unique constraint violated.", 409)
        return error_response("BAD_REQUEST", "Integrity error.", 400)

    # Werkzeug HTTPExceptions map to their status codes
    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        code = (err.name or "error").upper().replace(" ", "_")
        return error_response(code, err.description, err.code or 400)

    # 500 Internal Error (catch-all)
    @app.errorhandler(Exception)
    def internal_error(err: Exception):
        logger.exception("Unhandled exception", exc_info=err)
        # In dev, include exception details to speed up debugging
        details = None
        if current_app and current_app.debug:
            details = {"type": err.__class__.__name__, "message": str(err)}
        return error_response("INTERNAL_ERROR", "An unexpected error occurred", 500, details=details)
