"""JSON envelopes and the error boundary shared by all controllers."""
from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    StoreError,
    UnauthenticatedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (UnauthenticatedError, 401),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def ok(message: str, data: Any = None, status: int = 200):
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def fail(message: str, status: int, data: Any = None):
    body = {"success": False, "message": message}
    if data is not None:
        body["data"] = data
    return jsonify(body), status


def json_body() -> dict:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _serialize(data: Any) -> Optional[Any]:
    if data is None:
        return None
    as_dict = getattr(data, "as_dict", None)
    return as_dict() if callable(as_dict) else data


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return fail(e.message, status_for(e), _serialize(e.data))

    @app.errorhandler(StoreError)
    def handle_store_error(e: StoreError):
        logger.error("Store error on %s %s: %s", request.method, request.path, e)
        return fail("Server error while accessing the database", 500)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail("Internal server error", 500)
