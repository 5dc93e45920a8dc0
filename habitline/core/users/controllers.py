"""Profile and account controllers."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from habitline.core.users.schemas import ProfileUpdateRequest, serialize_profile
from habitline.core.users.services import delete_account, get_or_create_profile, update_profile
from habitline.core.utils.decorators import current_user_id, user_scoped

user_api_bp = Blueprint("user_api", __name__)


@user_api_bp.get("/profile")
@user_scoped
def api_profile():
    profile = get_or_create_profile(current_user_id())
    return jsonify({"ok": True, "profile": serialize_profile(profile)})


@user_api_bp.put("/profile")
@user_scoped
def api_update_profile():
    payload = request.get_json(silent=True) or {}
    try:
        data = ProfileUpdateRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors(include_url=False)}), 400
    profile = update_profile(current_user_id(), **data.model_dump())
    return jsonify({"ok": True, "profile": serialize_profile(profile)})


@user_api_bp.delete("")
@user_api_bp.delete("/delete")
@user_scoped
def api_delete_account():
    delete_account(current_user_id())
    return jsonify({"ok": True})
