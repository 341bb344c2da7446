"""
Pytest fixtures. Each test using the store gets a fresh temporary SQLite DB.
"""

from __future__ import annotations

import pytest


@pytest.fixture
def store_db(tmp_path, monkeypatch):
    """Point services.db at a temporary SQLite file and create the tables."""
    from services import db

    monkeypatch.setattr(db, "DB_PATH", str(tmp_path / "spam_detector.db"))
    db.init_db()
    return db


@pytest.fixture
def client(store_db, monkeypatch):
    """FastAPI TestClient with known admin credentials. Depends on store_db so the temp DB is used."""
    from fastapi.testclient import TestClient

    import api.main as main

    monkeypatch.setattr(main, "ADMIN_USER", "admin")
    monkeypatch.setattr(main, "ADMIN_PASS", "secret")

    with TestClient(main.app) as test_client:
        yield test_client
