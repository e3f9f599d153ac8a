from __future__ import annotations

from functools import wraps

from flask import jsonify, session

from ..core.exceptions import (
    ConflictError,
    DomainError,
    LockedError,
    NotFoundError,
    TooEarlyError,
    ValidationError,
)
from .logging import get_logger

logger = get_logger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (TooEarlyError, 409),
    (LockedError, 423),
    (ConflictError, 409),
)


def account_required(view):
    """Require an account id put in the session by the external auth layer."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("account_id"):
            return jsonify({"error": "Unauthorized", "code": "unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def error_response(exc: DomainError):
    status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 400)
    body = {"error": str(exc), "code": exc.code}
    if isinstance(exc, TooEarlyError):
        body["opensAt"] = exc.opens_at.isoformat()
    elif isinstance(exc, LockedError):
        body["lockedAt"] = exc.locked_at.isoformat()
    elif isinstance(exc, ConflictError):
        body["retryable"] = True
    return jsonify(body), status


def internal_error(message: str):
    logger.exception("request_failed", message=message)
    return jsonify({"error": message, "code": "internal_error"}), 500
