"""Access policy for tasks.

Pure predicates over an already-loaded user context and task snapshot.
Callers fetch the task first and raise TASK_NOT_FOUND themselves, so that a
missing task and a forbidden task stay distinguishable.

Write access is deliberately as permissive as read access: any member of the
task's family may update or delete it, not only its creator or assignee.
"""

from src.core.errors import TaskError
from src.domain.task import Task
from src.domain.user import UserContext


def can_read(user: UserContext, task: Task) -> bool:
    """Return True if the user created the task or shares its family."""
    if user.id == task.creator_id:
        return True
    return user.family_id is not None and user.family_id == task.family_id


def can_write(user: UserContext, task: Task) -> bool:
    """Return True if the user may update or delete the task."""
    return can_read(user, task)


def can_access_family(user: UserContext, family_id: str) -> bool:
    """Return True if the user may list the family's tasks."""
    return user.family_id is not None and user.family_id == family_id


def ensure_can_read(user: UserContext, task: Task) -> None:
    """Raise FORBIDDEN unless the user may read the task."""
    if not can_read(user, task):
        raise TaskError.forbidden("You do not have access to this task", details={"task_id": task.id})


def ensure_can_write(user: UserContext, task: Task, *, action: str = "update") -> None:
    """Raise FORBIDDEN unless the user may mutate the task."""
    if not can_write(user, task):
        raise TaskError.forbidden(f"You do not have permission to {action} this task", details={"task_id": task.id})
