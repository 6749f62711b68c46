from __future__ import annotations

from typing import Any

from flask import current_app, jsonify


class ApiError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationFailed(ApiError):
    status_code = 400

    def __init__(self, details: Any, message: str = "Validation failed"):
        super().__init__(message, details=details)


class NotFound(ApiError):
    status_code = 404


class Forbidden(ApiError):
    status_code = 403


class Unauthorized(ApiError):
    status_code = 401


class Conflict(ApiError):
    status_code = 409


class UpstreamError(ApiError):
    """A payment gateway call failed; message carries the gateway's reason when known."""

    status_code = 500


def register_error_handlers(app) -> None:
    @app.errorhandler(ApiError)
    def _handle_api_error(err: ApiError):
        if err.status_code >= 500:
            current_app.logger.error("%s: %s", type(err).__name__, err.message)
        return jsonify(err.to_dict()), err.status_code
