"""Pydantic models for creating task records."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.domain.task import TaskPriority, TaskStatus, ensure_utc, normalize_tags


class TaskCreate(BaseModel):
    """Client payload for creating a task.

    Ownership fields (family, creator) are not accepted here; they come from
    the authenticated user.
    """

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., description="Task title, non-empty after trimming")
    description: str | None = Field(default=None, description="Detailed task description")
    status: TaskStatus = Field(default=TaskStatus.PENDING, description="Initial lifecycle state")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Ordering priority")
    due_date: datetime | None = Field(default=None, description="Due date, must be in the future")
    assigned_to_id: str | None = Field(default=None, description="Assignee user ID (defaults to creator)")
    parent_task_id: str | None = Field(default=None, description="Parent task ID for subtasks")
    tags: list[str] | None = Field(default=None, description="Tags attached to the task")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate title is non-empty after trimming."""
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str]:
        return normalize_tags(v)

    @field_validator("assigned_to_id", "parent_task_id")
    @classmethod
    def validate_reference(cls, v: str | None) -> str | None:
        """Treat blank references as absent."""
        if v is None:
            return None
        v = v.strip()
        return v or None
