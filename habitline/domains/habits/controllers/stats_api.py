"""Per-user aggregate stats and trend series."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from habitline.core.utils.decorators import current_user_id, user_scoped
from habitline.domains.habits import services as habit_services
from habitline.domains.habits.schemas.habit_schemas import TrendPointResponse, UserStatsResponse

stats_api_bp = Blueprint("stats_api", __name__)


@stats_api_bp.get("")
@user_scoped
def user_stats():
    stats = habit_services.get_user_stats(current_user_id())
    return jsonify({"ok": True, "stats": UserStatsResponse(**stats).model_dump()})


@stats_api_bp.get("/trend")
@user_scoped
def user_trend():
    days = request.args.get("days", type=int)
    try:
        points = habit_services.get_user_trend(current_user_id(), days)
    except ValueError as exc:
        return jsonify({"ok": False, "error": str(exc)}), 400
    return jsonify(
        {
            "ok": True,
            "trend": [
                TrendPointResponse(date=point.date, success_rate=point.success_rate).model_dump(mode="json")
                for point in points
            ],
        }
    )
