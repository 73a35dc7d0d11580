"""
The Alembic revision must produce the same posts table the ORM expects:
upgrade an empty SQLite file to head, check the schema, downgrade again.
"""
import sqlite3
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config

from app.config import settings

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture(autouse=True)
def setup_db():
    """Replaces the in-memory schema fixture; these tests bring their own database."""
    yield


def _alembic_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    return cfg


def test_upgrade_and_downgrade(tmp_path, monkeypatch):
    db_file = tmp_path / "migrations.db"
    monkeypatch.setattr(settings, "DATABASE_URL", f"sqlite+aiosqlite:///{db_file}")
    cfg = _alembic_config()

    command.upgrade(cfg, "head")

    with sqlite3.connect(db_file) as conn:
        columns = {row[1] for row in conn.execute("PRAGMA table_info(posts)")}
        indexes = {row[1] for row in conn.execute("PRAGMA index_list(posts)")}
    assert columns == {"id", "title", "content", "image", "user_id", "created_at", "updated_at"}
    assert {"ix_posts_user_id", "ix_posts_created_at_id"} <= indexes
    # Unique title constraint shows up as an automatic index.
    assert any(name.startswith("sqlite_autoindex_posts") for name in indexes)

    command.downgrade(cfg, "base")

    with sqlite3.connect(db_file) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "posts" not in tables
