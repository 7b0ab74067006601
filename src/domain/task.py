"""Task domain models and enums."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from src.core.config import constants


class TaskStatus(StrEnum):
    """Task lifecycle state. Any value may be set at any time."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class TaskPriority(StrEnum):
    """Task priority, used only for ordering."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        """Numeric rank: LOW=1 < MEDIUM=2 < HIGH=3 < URGENT=4."""
        return _PRIORITY_RANKS[self]


_PRIORITY_RANKS: dict[TaskPriority, int] = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
    TaskPriority.URGENT: 4,
}


def ensure_utc(value: datetime | None) -> datetime | None:
    """Return ``value`` as an aware UTC datetime, treating naive input as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Trim tags and collapse duplicates, keeping first-seen order.

    Raises:
        ValueError: If a tag is empty, too long, or contains the separator
    """
    if not tags:
        return []

    normalized: list[str] = []
    for raw in tags:
        tag = raw.strip()
        if not tag:
            raise ValueError("Tags cannot be empty")
        if len(tag) > constants.MAX_TAG_LENGTH:
            raise ValueError(f"Tag too long (max {constants.MAX_TAG_LENGTH} characters)")
        if constants.TAG_SEPARATOR in tag:
            raise ValueError(f"Tags cannot contain '{constants.TAG_SEPARATOR}'")
        if tag not in normalized:
            normalized.append(tag)
    return normalized


class Task(BaseModel):
    """Task data transfer object."""

    id: str = Field(..., description="Unique task ID assigned by the task store")
    created_at: datetime = Field(..., description="Creation timestamp (UTC)")
    updated_at: datetime = Field(..., description="Last update timestamp (UTC)")
    title: str = Field(..., description="Task title")
    description: str = Field(default="", description="Detailed task description")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Current lifecycle state")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Ordering priority")
    due_date: datetime | None = Field(default=None, description="When the task is due (UTC)")
    completed_at: datetime | None = Field(default=None, description="When the task was completed (UTC)")
    tags: list[str] = Field(default_factory=list, description="Ordered set of tags")
    creator_id: str = Field(..., description="User who created the task")
    family_id: str = Field(..., description="Family the task belongs to")
    assigned_to_id: str | None = Field(default=None, description="User who must perform the task")
    parent_task_id: str | None = Field(default=None, description="Parent task ID for subtasks")
    sub_task_ids: list[str] = Field(
        default_factory=list,
        description="Ids of direct subtasks, derived from their parent links and never stored",
    )
