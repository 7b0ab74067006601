"""Tests for configuration validation."""

import pytest
from pydantic import ValidationError

from src.core.config import Settings, constants


def test_defaults() -> None:
    """Test hierarchy and paging defaults."""
    settings = Settings()

    assert settings.max_hierarchy_depth == 1000
    assert settings.max_subtasks is None
    assert settings.default_per_page_limit == 100


def test_settings_read_from_environment(monkeypatch) -> None:
    """Test environment variables override defaults."""
    monkeypatch.setenv("MAX_SUBTASKS", "25")
    monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/tasks.db")

    settings = Settings()

    assert settings.max_subtasks == 25
    assert settings.sqlite_db_path == "/tmp/tasks.db"


@pytest.mark.parametrize("field", ["max_hierarchy_depth", "max_subtasks", "default_per_page_limit"])
def test_limits_must_be_positive(field: str) -> None:
    """Test non-positive limits are rejected."""
    with pytest.raises(ValidationError, match=field):
        Settings(**{field: 0})


def test_tag_separator_is_single_character() -> None:
    assert len(constants.TAG_SEPARATOR) == 1
