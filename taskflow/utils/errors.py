"""Standardised API error responses.

Usage
-----
    from taskflow.utils.errors import api_error, E

    return api_error(E.NOT_FOUND, "Task not found")
    return api_error(E.VALIDATION_REQUIRED, "name is required")
"""

from __future__ import annotations

import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError

from taskflow.core.exceptions import (
    AuthenticationRequired,
    ConflictError,
    NotFoundError,
    PermissionDenied,
    TransitionConflict,
    ValidationError,
)
from taskflow.models import db

logger = logging.getLogger(__name__)


# ── Error code constants ──────────────────────────────────────────────
class E:
    """Machine-readable error code constants."""

    # Validation – HTTP 400
    VALIDATION_REQUIRED = "ERR_VALIDATION_REQUIRED"
    VALIDATION_INVALID = "ERR_VALIDATION_INVALID"

    # Auth – HTTP 401 / 403
    UNAUTHENTICATED = "ERR_UNAUTHENTICATED"
    FORBIDDEN = "ERR_FORBIDDEN"
    ACCOUNT_DISABLED = "ERR_ACCOUNT_DISABLED"

    # Not-found – HTTP 404
    NOT_FOUND = "ERR_NOT_FOUND"

    # Conflict / duplicate – HTTP 409
    CONFLICT_DUPLICATE = "ERR_CONFLICT_DUPLICATE"
    CONFLICT_STATE = "ERR_CONFLICT_STATE"

    # Server – HTTP 500
    DATABASE = "ERR_DATABASE"
    INTERNAL = "ERR_INTERNAL"


# ── Default HTTP status mapping ───────────────────────────────────────
_DEFAULT_STATUS: dict[str, int] = {
    E.VALIDATION_REQUIRED: 400,
    E.VALIDATION_INVALID: 400,
    E.UNAUTHENTICATED: 401,
    E.FORBIDDEN: 403,
    E.ACCOUNT_DISABLED: 403,
    E.NOT_FOUND: 404,
    E.CONFLICT_DUPLICATE: 409,
    E.CONFLICT_STATE: 409,
    E.DATABASE: 500,
    E.INTERNAL: 500,
}


def api_error(
    code: str,
    message: str,
    *,
    status: int | None = None,
    details: dict | None = None,
):
    """Return ``(jsonify({"error", "code", "details"?}), status)``.

    ``status`` defaults to the code's mapping in ``_DEFAULT_STATUS`` (400
    for unknown codes).
    """
    http_status = status or _DEFAULT_STATUS.get(code, 400)

    body: dict = {
        "error": message,
        "code": code,
    }
    if details:
        body["details"] = details

    return jsonify(body), http_status


def register_error_handlers(app):
    """Map the service exception hierarchy onto HTTP responses."""

    @app.errorhandler(AuthenticationRequired)
    def _handle_unauthenticated(error):
        return api_error(E.UNAUTHENTICATED, str(error))

    @app.errorhandler(PermissionDenied)
    def _handle_forbidden(error):
        logger.info("Permission denied: user=%s action=%s", error.username, error.action)
        return api_error(E.FORBIDDEN, str(error))

    @app.errorhandler(NotFoundError)
    def _handle_not_found(error):
        return api_error(E.NOT_FOUND, str(error))

    @app.errorhandler(ValidationError)
    def _handle_validation(error):
        return api_error(E.VALIDATION_INVALID, str(error), details=error.details)

    @app.errorhandler(ConflictError)
    def _handle_duplicate(error):
        return api_error(E.CONFLICT_DUPLICATE, str(error))

    @app.errorhandler(TransitionConflict)
    def _handle_state_conflict(error):
        return api_error(
            E.CONFLICT_STATE, str(error),
            details={"current_state": error.current_state, "reload": True},
        )

    @app.errorhandler(SQLAlchemyError)
    def _handle_db_error(error):
        logger.exception("Database error")
        db.session.rollback()
        return api_error(E.DATABASE, "Database error")
