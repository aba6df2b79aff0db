from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ApiError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400


class PeriodClosed(ApiError):
    """Raised when a write touches a date inside an active closing period."""

    status_code = 400

    def __init__(self, day: str):
        super().__init__(f"Periode untuk tanggal {day} sudah ditutup.")
        self.day = day


class NotFound(ApiError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


def register_error_handlers(app: Flask):
    @app.errorhandler(ApiError)
    def api_error(e: ApiError):
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def internal_error(e: Exception):
        logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500
