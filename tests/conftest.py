"""Shared pytest fixtures for the library tests."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from library_web.app.core.config import settings
from library_web.app.core.db import init_db


@pytest.fixture
def db(tmp_path: Path, monkeypatch) -> Path:
    """Point the application at a fresh, migrated SQLite file."""
    db_file = tmp_path / "library.db"
    monkeypatch.setattr(settings, "database_url", str(db_file))
    init_db()
    return db_file


@pytest.fixture
def client(db):
    from library_web.app.main import app

    with TestClient(app) as test_client:
        yield test_client
