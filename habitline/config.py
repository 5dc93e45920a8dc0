"""Application configuration for Habitline."""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Dict, Type

from dotenv import load_dotenv
from sqlalchemy.engine.url import make_url

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _engine_options_from_uri(uri: str) -> dict:
    url = make_url(uri)
    # Always keep pool_pre_ping, vary connect_args by dialect.
    if url.get_backend_name() == "sqlite":
        return {"pool_pre_ping": True, "connect_args": {"timeout": 30}}
    if url.get_backend_name() in {"postgresql", "postgres"}:
        timeout = int(os.environ.get("DB_CONNECT_TIMEOUT_SECONDS", "10"))
        return {"pool_pre_ping": True, "connect_args": {"connect_timeout": timeout}}
    return {"pool_pre_ping": True}


class BaseConfig:
    """Base configuration loaded for all environments."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///instance/habitline.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(2 * 1024 * 1024)))

    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", SECRET_KEY)
    JWT_TOKEN_LOCATION = ["headers"]
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=int(os.environ.get("JWT_ACCESS_MINUTES", "30")))

    # Identity: JWT subject first, then the plain header the SPA sends.
    ALLOW_HEADER_IDENTITY = _flag("ALLOW_HEADER_IDENTITY", "true")
    USER_ID_HEADER = os.environ.get("USER_ID_HEADER", "User-Id")
    DEFAULT_USER_ID = os.environ.get("DEFAULT_USER_ID") or None

    # Every calendar day in the system is a day in this zone.
    APP_TIMEZONE = os.environ.get("APP_TIMEZONE", "UTC")
    STATS_WINDOW_DAYS = int(os.environ.get("STATS_WINDOW_DAYS", "21"))
    DEFAULT_TREND_DAYS = int(os.environ.get("DEFAULT_TREND_DAYS", "30"))
    MAX_RANGE_DAYS = int(os.environ.get("MAX_RANGE_DAYS", "365"))

    DEFAULT_LANGUAGE = os.environ.get("DEFAULT_LANGUAGE", "English")

    CORS_ORIGINS = (os.environ.get("CORS_ORIGINS") or "*").split(",")

    RATELIMIT_DEFAULT = os.environ.get("RATELIMIT_DEFAULT", "600/hour")
    RATELIMIT_STORAGE_URI = os.environ.get("REDIS_URL", "memory://")
    RATELIMIT_ENABLED = _flag("RATELIMIT_ENABLED", "true")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    ENV = "development"
    DEFAULT_USER_ID = os.environ.get("DEFAULT_USER_ID", "default_user")


class TestingConfig(BaseConfig):
    TESTING = True
    # File-backed SQLite so Alembic migrations and the app share one database.
    SQLALCHEMY_DATABASE_URI = os.environ.get("TEST_DATABASE_URL", "sqlite:///instance/test.db")
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options_from_uri(SQLALCHEMY_DATABASE_URI)
    RATELIMIT_ENABLED = False
    ALLOW_HEADER_IDENTITY = True
    DEFAULT_USER_ID = None
    APP_TIMEZONE = "UTC"
    LOG_LEVEL = "DEBUG"


class ProductionConfig(BaseConfig):
    ENV = "production"
    ALLOW_HEADER_IDENTITY = _flag("ALLOW_HEADER_IDENTITY", "false")


config_by_name: Dict[str, Type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
    # CI pipelines set APP_ENV=ci; map to testing defaults.
    "ci": TestingConfig,
}
