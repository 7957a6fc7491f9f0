import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ClinicError(Exception):
    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ClinicError):
    status_code = 400
    default_message = "Missing data"


class Unauthenticated(ClinicError):
    status_code = 401
    default_message = "Unauthenticated"


class Forbidden(ClinicError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ClinicError):
    status_code = 404
    default_message = "Not found"


class Conflict(ClinicError):
    status_code = 409
    default_message = "Conflict"


def register_error_handlers(app):
    @app.errorhandler(ClinicError)
    def _clinic_error(e):
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return jsonify({"message": e.description}), e.code

    @app.errorhandler(Exception)
    def _unexpected(e):
        logger.exception("Unhandled error: %s", e)
        return jsonify({"message": "Server error"}), 500
