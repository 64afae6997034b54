from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    OperationFailed,
    PartialBatchFailure,
    ReferentialIntegrityError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first: PartialBatchFailure is an OperationFailed.
_STATUS_BY_ERROR: tuple[tuple[type[DomainError], int], ...] = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ValidationError, 400),
    (ReferentialIntegrityError, 409),
    (PartialBatchFailure, 502),
    (OperationFailed, 500),
)


def status_for(error: DomainError) -> int:
    for cls, status in _STATUS_BY_ERROR:
        if isinstance(error, cls):
            return status
    return 400


def error_response(error: Exception):
    if isinstance(error, DomainError):
        status = status_for(error)
        if status >= 500:
            logger.error("%s %s -> %d: %s", request.method, request.path, status, error)
        return jsonify({"success": False, "message": str(error)}), status

    logger.exception("unhandled error on %s %s", request.method, request.path)
    return jsonify({"success": False, "message": "Terjadi kesalahan sistem"}), 500


def json_api(view):
    """Turn domain errors raised by a view into {"success": False, "message": ...} responses."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except Exception as e:
            return error_response(e)

    return wrapper


def split_ids(value: str | None) -> list[str]:
    """'a,b , c' -> ['a', 'b', 'c']"""
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]
