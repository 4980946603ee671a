"""
Error taxonomy for the lifecycle services and its HTTP mapping.

Services raise these; handlers never build error responses by hand.
"""
from __future__ import annotations

from flask import Flask, g, jsonify
from werkzeug.exceptions import HTTPException

GENERIC_MESSAGE = "Something went wrong"


class ServiceError(Exception):
    status_code = 500
    default_message = GENERIC_MESSAGE

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Missing or malformed input."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(ServiceError):
    """Referenced entity does not exist."""

    status_code = 404
    default_message = "Not found"


class ConflictError(ServiceError):
    """Uniqueness or business-rule violation."""

    status_code = 400
    default_message = "Conflict"


class UnexpectedError(ServiceError):
    """Store or transport failure. Detail stays in the server log."""

    status_code = 500


def _error_response(message: str, status_code: int):
    return jsonify({"message": message}), status_code


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ServiceError)
    def _service_error(e: ServiceError):  # type: ignore[no-redef]
        if isinstance(e, UnexpectedError):
            app.logger.error(
                "Unexpected error (request_id=%s): %s", getattr(g, "request_id", None), e, exc_info=e.__cause__ or e
            )
            return _error_response(GENERIC_MESSAGE, 500)
        return _error_response(e.message, e.status_code)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):  # type: ignore[no-redef]
        return _error_response(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):  # type: ignore[no-redef]
        # Stack trace goes to the server log only.
        app.logger.exception("Unhandled error (request_id=%s)", getattr(g, "request_id", None))
        return _error_response(GENERIC_MESSAGE, 500)
