"""Flask glue shared by the feature controllers.

Identity is resolved upstream by the auth gateway and forwarded in headers;
the request body is never trusted for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, DomainError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

ROLE_HEADER = "X-User-Role"
USER_HEADER = "X-User-Id"
SCHOOL_HEADER = "X-School-Id"


@dataclass(frozen=True)
class Caller:
    role: Role
    user_id: str
    tenant_id: str


def caller_required(*roles: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            role_s = (request.headers.get(ROLE_HEADER) or "").strip().lower()
            user_id = (request.headers.get(USER_HEADER) or "").strip()
            tenant_id = (request.headers.get(SCHOOL_HEADER) or "").strip()

            try:
                role = Role(role_s)
            except ValueError:
                raise AuthorizationError("Unauthorized")
            if role not in roles or not user_id or not tenant_id:
                raise AuthorizationError("Unauthorized")

            g.caller = Caller(role=role, user_id=user_id, tenant_id=tenant_id)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def error_response(e: DomainError, status: int):
    return (
        jsonify(
            {
                "success": False,
                "message": e.message,
                "reason": e.reason.value if e.reason else None,
                "details": e.details,
            }
        ),
        status,
    )


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return error_response(e, 400)

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return error_response(e, 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e: NotFoundError):
        return error_response(e, 404)

    @app.errorhandler(ConflictError)
    def _conflict(e: ConflictError):
        return error_response(e, 409)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.path)
        return jsonify({"success": False, "message": "Internal server error"}), 500
