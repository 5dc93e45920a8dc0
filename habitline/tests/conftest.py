import os
import sys
from pathlib import Path
from uuid import uuid4

import pytest
from sqlalchemy.orm import scoped_session, sessionmaker
from alembic import command
from alembic.config import Config as AlembicConfig

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from habitline import create_app
from habitline.extensions import db
from habitline.core.users import models as user_models  # noqa: F401
from habitline.domains.habits.models import habit_models  # noqa: F401
from habitline.domains.mood.models import mood_models  # noqa: F401


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")
    config.addinivalue_line("markers", "smoke: Quick smoke tests for CI")


def _alembic_config() -> AlembicConfig:
    cfg = AlembicConfig(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "habitline" / "migrations"))
    cfg.set_main_option("habitline_env", "testing")
    return cfg


@pytest.fixture(scope="session", autouse=True)
def migrated_db():
    """Apply migrations once per session to mirror production schema."""
    os.environ.setdefault("APP_ENV", "testing")
    cfg = _alembic_config()
    command.downgrade(cfg, "base")
    command.upgrade(cfg, "head")
    yield
    command.downgrade(cfg, "base")


@pytest.fixture()
def app(migrated_db):
    """
    Create a per-test app with an isolated database transaction.

    Each test runs inside its own transaction + savepoint so committed data
    rolls back after the test.
    """
    app = create_app("testing")
    ctx = app.app_context()
    ctx.push()

    connection = db.engine.connect()
    transaction = connection.begin()

    session_factory = scoped_session(
        sessionmaker(bind=connection, join_transaction_mode="create_savepoint")
    )
    original_session = db.session
    db.session = session_factory

    try:
        yield app
    finally:
        session_factory.remove()
        transaction.rollback()
        connection.close()
        db.session = original_session
        ctx.pop()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def user_id():
    """A fresh opaque user id per test."""
    return f"user-{uuid4().hex[:12]}"


@pytest.fixture()
def headers(user_id):
    return {"User-Id": user_id}
