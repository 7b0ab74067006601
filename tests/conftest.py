"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from src.core.config import settings
from src.domain.task import Task, TaskPriority, TaskStatus
from src.domain.user import UserContext, UserRole


FAMILY_ID = "family-smith"
OTHER_FAMILY_ID = "family-jones"


@pytest.fixture
def parent_user() -> UserContext:
    return UserContext(id="user-alice", role=UserRole.PARENT, family_id=FAMILY_ID)


@pytest.fixture
def child_user() -> UserContext:
    return UserContext(id="user-bobby", role=UserRole.CHILD, family_id=FAMILY_ID)


@pytest.fixture
def outsider_user() -> UserContext:
    return UserContext(id="user-carol", role=UserRole.PARENT, family_id=OTHER_FAMILY_ID)


@pytest.fixture
def future() -> Callable[..., datetime]:
    """Returns a helper producing UTC datetimes relative to now."""

    def _future(*, days: float = 0, hours: float = 0) -> datetime:
        return datetime.now(UTC) + timedelta(days=days, hours=hours)

    return _future


@pytest.fixture
def make_task() -> Callable[..., Task]:
    """Builds Task snapshots without a store, for pure-function tests."""
    counter = iter(range(1, 10_000))

    def _make(**overrides: Any) -> Task:
        now = datetime.now(UTC)
        data: dict[str, Any] = {
            "id": f"task-{next(counter)}",
            "created_at": now,
            "updated_at": now,
            "title": "Take out the trash",
            "status": TaskStatus.PENDING,
            "priority": TaskPriority.MEDIUM,
            "creator_id": "user-alice",
            "family_id": FAMILY_ID,
            "assigned_to_id": "user-alice",
        }
        data.update(overrides)
        return Task(**data)

    return _make


@pytest.fixture
def hierarchy_limits(monkeypatch) -> Callable[..., None]:
    """Overrides hierarchy-related settings for a single test."""

    def _set(*, max_depth: int | None = None, max_subtasks: int | None = None) -> None:
        if max_depth is not None:
            monkeypatch.setattr(settings, "max_hierarchy_depth", max_depth)
        monkeypatch.setattr(settings, "max_subtasks", max_subtasks)

    return _set
