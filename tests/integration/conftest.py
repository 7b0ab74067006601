"""Pytest configuration and fixtures for integration tests."""

import pytest

from src.core import db_client
from src.core.config import settings


@pytest.fixture
async def sqlite_db(tmp_path, monkeypatch):
    """Point the task store at a fresh SQLite file for a single test."""
    db_path = str(tmp_path / "tasks.db")
    monkeypatch.setattr(settings, "sqlite_db_path", db_path)

    await db_client.init_db()
    yield db_path
    await db_client.close_connection()
