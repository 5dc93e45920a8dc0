"""Habitline application factory and bootstrap."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from flask import Flask

from habitline.config import config_by_name
from habitline.extensions import init_extensions


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Habitline Flask application."""
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(__name__, instance_path=str(instance_root), instance_relative_config=True)
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)
    # Engine options are a class-level dict; copy so per-app tweaks stay local.
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})

    instance_root.mkdir(parents=True, exist_ok=True)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///") and db_uri != "sqlite:///:memory:":
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        if not db_path.is_absolute():
            db_path = project_root / db_path
        db_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    _configure_logging(app)
    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    @app.get("/api/health")
    def api_health():
        """Liveness probe for the SPA and load balancers."""
        return {"ok": True, "status": "healthy"}, 200

    from habitline.scripts.recompute import register_commands

    register_commands(app)

    return app


def _configure_logging(app: Flask) -> None:
    level = logging.getLevelName(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    if not isinstance(level, int):
        level = logging.INFO
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    logging.getLogger("habitline").setLevel(level)
    app.logger.setLevel(level)


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from habitline.core.users.controllers import user_api_bp
    from habitline.domains.habits.controllers.habit_api import habit_api_bp
    from habitline.domains.habits.controllers.stats_api import stats_api_bp
    from habitline.domains.mood.controllers.mood_api import mood_api_bp

    app.register_blueprint(habit_api_bp, url_prefix="/api/habits")
    # The SPA lists habits and day completions under /api/user/habits.
    app.register_blueprint(habit_api_bp, url_prefix="/api/user/habits", name="user_habit_api")
    app.register_blueprint(stats_api_bp, url_prefix="/api/user/stats")
    app.register_blueprint(mood_api_bp, url_prefix="/api/user/mood")
    app.register_blueprint(user_api_bp, url_prefix="/api/user")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from werkzeug.exceptions import HTTPException

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.description}, exc.code

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500
