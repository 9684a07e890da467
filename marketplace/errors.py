# marketplace/errors.py
from flask import jsonify, current_app
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

from marketplace.extensions import db


class ApiError(Exception):
    """Error with an HTTP status, rendered as {"ok": false, "error": ...}."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def __repr__(self):
        return f"<ApiError {self.status_code}: {self.message}>"


def _error(status_code: int, message: str):
    return jsonify({"ok": False, "error": message}), status_code


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        if exc.status_code >= 500:
            current_app.logger.error("[API] %s", exc.message)
        return _error(exc.status_code, exc.message)

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return _error(exc.code or 500, exc.description or exc.name)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(exc: IntegrityError):
        db.session.rollback()
        current_app.logger.warning("[DB] integrity error: %s", exc.orig)
        return _error(409, "Resource conflicts with an existing record.")

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        db.session.rollback()
        current_app.logger.exception("Unhandled error")
        return _error(500, "Internal server error")
