"""Reusable decorators for controllers."""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional, TypeVar

from flask import current_app, g, jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

F = TypeVar("F", bound=Callable)

_MAX_USER_ID_LENGTH = 128


def _resolve_user_id() -> Optional[str]:
    """JWT subject, else the identity header, else the configured default."""
    if request.headers.get("Authorization"):
        verify_jwt_in_request()
        identity = get_jwt_identity()
        return str(identity) if identity is not None else None
    if current_app.config.get("ALLOW_HEADER_IDENTITY", False):
        header = current_app.config.get("USER_ID_HEADER", "User-Id")
        value = (request.headers.get(header) or "").strip()
        if value:
            return value
    return current_app.config.get("DEFAULT_USER_ID") or None


def current_user_id() -> str:
    return g.user_id


def user_scoped(fn: F) -> F:
    """Resolve the caller's user id into ``g.user_id`` or answer 401."""

    @wraps(fn)
    def wrapper(*args, **kwargs):  # type: ignore[misc]
        try:
            user_id = _resolve_user_id()
        except (JWTExtendedException, PyJWTError):
            return jsonify({"ok": False, "error": "unauthorized"}), 401
        if not user_id or len(user_id) > _MAX_USER_ID_LENGTH:
            return jsonify({"ok": False, "error": "unauthorized"}), 401
        g.user_id = user_id
        return fn(*args, **kwargs)

    return wrapper  # type: ignore[return-value]
