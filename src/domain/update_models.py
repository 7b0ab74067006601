"""Update models for task operations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from src.domain.task import TaskPriority, TaskStatus, ensure_utc, normalize_tags


class TaskUpdate(BaseModel):
    """Partial update payload. Only fields present in the request are applied.

    Validators only run for fields the caller supplied, so an explicit null
    reaches them while an omitted field does not.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: datetime | None = None
    completed_at: datetime | None = None
    assigned_to_id: str | None = None
    parent_task_id: str | None = None
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Title cannot be empty")
        return v

    @field_validator("status", "priority")
    @classmethod
    def reject_null(cls, v: TaskStatus | TaskPriority | None) -> TaskStatus | TaskPriority:
        if v is None:
            raise ValueError("Value cannot be null")
        return v

    @field_validator("due_date", "completed_at")
    @classmethod
    def normalize_timestamps(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str]:
        return normalize_tags(v)

    @field_validator("assigned_to_id", "parent_task_id")
    @classmethod
    def validate_reference(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    def changes(self) -> dict[str, object]:
        """Fields explicitly supplied by the caller, including explicit nulls."""
        return self.model_dump(exclude_unset=True)
