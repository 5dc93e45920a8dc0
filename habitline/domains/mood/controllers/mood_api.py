"""Mood/focus JSON API."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from pydantic import ValidationError

from habitline.core.utils.decorators import current_user_id, user_scoped
from habitline.domains.mood.schemas.mood_schemas import MoodSave, serialize_mood
from habitline.domains.mood.services import mood_service

mood_api_bp = Blueprint("mood_api", __name__)


@mood_api_bp.post("")
@user_scoped
def save_mood():
    payload = request.get_json(silent=True) or {}
    try:
        data = MoodSave.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors(include_url=False)}), 400
    try:
        entry = mood_service.save_mood(
            current_user_id(),
            mood=data.mood,
            focus_level=data.focus_level,
            day=data.date,
        )
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400
    return jsonify({"ok": True, "mood": serialize_mood(entry)})


@mood_api_bp.get("")
@user_scoped
def get_mood():
    try:
        entry = mood_service.get_mood(current_user_id(), request.args.get("date"))
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400
    return jsonify({"ok": True, "mood": serialize_mood(entry) if entry else None})


@mood_api_bp.get("/history")
@user_scoped
def mood_history():
    days = request.args.get("days", type=int) or current_app.config.get("STATS_WINDOW_DAYS", 21)
    try:
        entries = mood_service.mood_history(current_user_id(), days)
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400
    return jsonify({"ok": True, "history": [serialize_mood(entry) for entry in entries]})
