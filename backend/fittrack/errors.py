# Overview: Typed API errors and the JSON error handlers registered on the app.

"""
Every failure a handler can produce maps to one of these classes. Services
raise them; the handlers registered in register_error_handlers() render the
{error, message?} envelope with the matching status code.
"""

from __future__ import annotations

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

MAX_ERROR_MESSAGE_LENGTH = 500


class ApiError(Exception):
    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str | None = None, **extra):
        super().__init__(message or self.error)
        self.message = message
        self.extra = extra

    def to_dict(self) -> dict:
        body = {"error": self.message or self.error}
        body.update({k: v for k, v in self.extra.items() if v is not None})
        return body


class AuthenticationError(ApiError):
    """No token, malformed header, bad signature or expired token."""
    status_code = 401
    error = "Authentication required"


class AuthorizationError(ApiError):
    """Authenticated, but the role or row-level rule forbids the action."""
    status_code = 403
    error = "Insufficient permissions"


class ValidationError(ApiError):
    status_code = 400
    error = "Validation failed"


class ConflictError(ValidationError):
    """Duplicate phone/email or a delete blocked by dependent rows."""


class NotFoundError(ApiError):
    status_code = 404
    error = "Not found"


class SchemaNotReadyError(ApiError):
    """
    An optional feature table has not been migrated yet.

    Read paths catch this and answer with an empty payload; anything that
    reaches the app handler is a write and becomes a 501.
    """
    status_code = 501
    error = "Feature not available"

    def __init__(self, table: str):
        super().__init__(f"Table '{table}' does not exist. Run database migrations.")
        self.table = table

    def to_dict(self) -> dict:
        return {"error": self.error, "message": self.message}


class UnexpectedError(ApiError):
    status_code = 500


def _truncate(message: str) -> str:
    return message[:MAX_ERROR_MESSAGE_LENGTH]


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        if e.status_code >= 500:
            current_app.logger.error("%s: %s", type(e).__name__, e)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def handle_not_found(e):
        return jsonify({"error": "Not found"}), 404

    @app.errorhandler(405)
    def handle_method_not_allowed(e):
        return jsonify({"error": "Method not allowed"}), 405

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        return jsonify({"error": e.name, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        current_app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error", "message": _truncate(str(e))}), 500
