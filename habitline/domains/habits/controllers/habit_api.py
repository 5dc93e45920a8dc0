"""Habits JSON API controllers (thin, schema-validated)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from habitline.core.utils.decorators import current_user_id, user_scoped
from habitline.domains.habits import services as habit_services
from habitline.domains.habits.schemas.habit_schemas import (
    CompletionRequest,
    CompletionStatusResponse,
    DerivedFieldsResponse,
    HabitCreate,
    HabitUpdate,
    HistoryDayResponse,
    serialize_habit,
)

habit_api_bp = Blueprint("habit_api", __name__)

_ERROR_STATUS = {"not_found": 404}


def _service_error(exc: ValueError):
    code = str(exc)
    return jsonify({"ok": False, "error": code}), _ERROR_STATUS.get(code, 400)


@habit_api_bp.get("")
@user_scoped
def list_habits():
    items = habit_services.list_habits(current_user_id())
    return jsonify({"ok": True, "habits": [serialize_habit(item) for item in items]})


@habit_api_bp.post("")
@user_scoped
def create_habit():
    payload = request.get_json(silent=True) or {}
    try:
        data = HabitCreate.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors(include_url=False)}), 400
    try:
        habit = habit_services.create_habit(current_user_id(), **data.model_dump())
    except ValueError as exc:
        return _service_error(exc)
    detail = habit_services.get_habit_detail(current_user_id(), habit.id)
    return jsonify({"ok": True, "habit": serialize_habit(detail)}), 201


@habit_api_bp.get("/completions")
@user_scoped
def completions_for_date():
    try:
        rows = habit_services.get_completions_for_date(current_user_id(), request.args.get("date") or None)
    except ValueError as exc:
        return _service_error(exc)
    return jsonify(
        {
            "ok": True,
            "completions": [CompletionStatusResponse(**row).model_dump() for row in rows],
        }
    )


@habit_api_bp.get("/<int:habit_id>")
@user_scoped
def habit_detail(habit_id: int):
    detail = habit_services.get_habit_detail(current_user_id(), habit_id)
    if not detail:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True, "habit": serialize_habit(detail)})


@habit_api_bp.route("/<int:habit_id>", methods=["PUT", "PATCH"])
@user_scoped
def update_habit(habit_id: int):
    payload = request.get_json(silent=True) or {}
    try:
        data = HabitUpdate.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors(include_url=False)}), 400
    try:
        habit = habit_services.update_habit(
            current_user_id(),
            habit_id,
            **{k: v for k, v in data.model_dump().items() if v is not None},
        )
    except ValueError as exc:
        return _service_error(exc)
    if not habit:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


@habit_api_bp.delete("/<int:habit_id>")
@user_scoped
def delete_habit(habit_id: int):
    deleted = habit_services.delete_habit(current_user_id(), habit_id)
    if not deleted:
        return jsonify({"ok": False, "error": "not_found"}), 404
    return jsonify({"ok": True})


def _toggle(habit_id: int, complete: bool):
    payload = request.get_json(silent=True) or {}
    try:
        data = CompletionRequest.model_validate(payload)
    except ValidationError as exc:
        return jsonify({"ok": False, "error": "validation_error", "details": exc.errors(include_url=False)}), 400
    action = habit_services.complete_habit if complete else habit_services.uncomplete_habit
    try:
        changed, fields = action(current_user_id(), habit_id, data.date or None)
    except ValueError as exc:
        return _service_error(exc)
    return jsonify(
        {
            "ok": True,
            "changed": changed,
            "stats": DerivedFieldsResponse(
                current_streak=fields.current_streak,
                best_streak=fields.best_streak,
                total_completions=fields.total_completions,
            ).model_dump(),
        }
    )


@habit_api_bp.post("/<int:habit_id>/complete")
@user_scoped
def complete_habit(habit_id: int):
    return _toggle(habit_id, complete=True)


@habit_api_bp.post("/<int:habit_id>/uncomplete")
@user_scoped
def uncomplete_habit(habit_id: int):
    return _toggle(habit_id, complete=False)


@habit_api_bp.get("/<int:habit_id>/history")
@user_scoped
def habit_history(habit_id: int):
    days = request.args.get("days", type=int)
    try:
        history = habit_services.get_habit_history(current_user_id(), habit_id, days)
    except ValueError as exc:
        return _service_error(exc)
    return jsonify(
        {
            "ok": True,
            "history": [
                HistoryDayResponse(date=day, completed=done).model_dump(mode="json")
                for day, done in history
            ],
        }
    )
