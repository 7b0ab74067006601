"""Declarative filter and sort requests for family task listings."""

from datetime import datetime
from enum import StrEnum
from typing import Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.domain.task import TaskPriority, TaskStatus, ensure_utc


class SortField(StrEnum):
    """Fields a listing may be ordered by."""

    PRIORITY = "priority"
    DUE_DATE = "due_date"
    CREATED_AT = "created_at"


class SortOrder(StrEnum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class DueDateRange(BaseModel):
    """Inclusive due-date window; either bound may be open."""

    model_config = ConfigDict(extra="forbid")

    start: datetime | None = None
    end: datetime | None = None

    @field_validator("start", "end")
    @classmethod
    def normalize_bounds(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v)

    @model_validator(mode="after")
    def validate_bounds(self) -> Self:
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("Due date range start must not be after its end")
        return self

    def contains(self, value: datetime | None) -> bool:
        if value is None:
            return False
        if self.start is not None and value < self.start:
            return False
        return not (self.end is not None and value > self.end)


class TaskFilters(BaseModel):
    """Conjunctive filter predicates. Omitted fields do not constrain the result."""

    model_config = ConfigDict(extra="forbid")

    status: set[TaskStatus] | None = Field(default=None, description="Allowed statuses")
    priority: set[TaskPriority] | None = Field(default=None, description="Allowed priorities")
    assigned_to_id: str | None = Field(default=None, description="Exact assignee match")
    tags: set[str] | None = Field(default=None, description="Tags the task must all carry")
    parent_task_id: str | None = Field(default=None, description="Exact parent match")
    has_subtasks: bool | None = Field(default=None, description="Whether the task has children")
    due_date: DueDateRange | None = Field(default=None, description="Inclusive due date window")

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, v: set[str] | None) -> set[str] | None:
        if v is None:
            return None
        return {tag.strip() for tag in v if tag.strip()}


class TaskSort(BaseModel):
    """Explicit ordering request."""

    model_config = ConfigDict(extra="forbid")

    sort_by: SortField = SortField.PRIORITY
    order: SortOrder = SortOrder.ASC
