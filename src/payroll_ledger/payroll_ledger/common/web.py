"""Flask request helpers shared by the controllers.

Identity is issued elsewhere and arrives in the session as ``user_id`` and
``role``; these helpers only read it.
"""

from __future__ import annotations

from functools import wraps
from typing import Any

from flask import jsonify, request, session

from ..core.actor import Actor
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError


def current_actor() -> Actor:
    if "user_id" not in session:
        raise AuthenticationError("Authentication required")
    try:
        role = Role(session.get("role") or Role.EMPLOYEE.value)
    except ValueError:
        raise AuthorizationError("Unknown role") from None
    return Actor(user_id=int(session["user_id"]), role=role)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_actor()
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if not current_actor().is_admin:
            raise AuthorizationError("Admin access required")
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data: Any = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def ok(payload: dict | None = None, status: int = 200):
    body = {"success": True}
    body.update(payload or {})
    return jsonify(body), status
