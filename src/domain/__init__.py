"""Domain models and DTOs."""

from src.domain.create_models import TaskCreate
from src.domain.filters import DueDateRange, SortField, SortOrder, TaskFilters, TaskSort
from src.domain.task import Task, TaskPriority, TaskStatus
from src.domain.update_models import TaskUpdate
from src.domain.user import UserContext, UserRole


__all__ = [
    "DueDateRange",
    "SortField",
    "SortOrder",
    "Task",
    "TaskCreate",
    "TaskFilters",
    "TaskPriority",
    "TaskSort",
    "TaskStatus",
    "TaskUpdate",
    "UserContext",
    "UserRole",
]
