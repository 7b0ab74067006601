"""Subtask hierarchy validation.

A task's parent chain must terminate without revisiting a task. The walk is
iterative and bounded by ``settings.max_hierarchy_depth`` so a corrupt or
pathologically deep chain cannot loop forever.
"""

import logging

from src.core.config import settings
from src.core.errors import TaskError
from src.core.logging import span
from src.services import task_store


logger = logging.getLogger(__name__)


async def would_create_cycle(
    candidate_parent_id: str,
    exclude_task_id: str | None = None,
    *,
    max_depth: int | None = None,
) -> bool:
    """Check whether linking a task under ``candidate_parent_id`` forms a cycle.

    Walks upward from the candidate parent following ``parent_task_id``.

    Args:
        candidate_parent_id: Proposed parent of the task being written
        exclude_task_id: The task being created/updated; reaching it means a cycle
        max_depth: Ceiling on visited tasks (defaults to settings.max_hierarchy_depth)

    Returns:
        True if the walk reaches ``exclude_task_id``, revisits a task, or exceeds
        the ceiling. False once the chain ends or an id does not resolve.
    """
    ceiling = max_depth if max_depth is not None else settings.max_hierarchy_depth

    with span("hierarchy_service.would_create_cycle"):
        visited: set[str] = set()
        current: str | None = candidate_parent_id

        while current:
            if current == exclude_task_id or current in visited:
                logger.info(
                    "Subtask cycle detected",
                    extra={"candidate_parent_id": candidate_parent_id, "task_id": exclude_task_id, "at": current},
                )
                return True

            visited.add(current)
            if len(visited) > ceiling:
                logger.warning(
                    "Parent chain exceeded depth ceiling",
                    extra={"candidate_parent_id": candidate_parent_id, "ceiling": ceiling},
                )
                return True

            task = await task_store.get_task(current)
            if task is None:
                return False
            current = task.parent_task_id

        return False


async def count_subtasks(task_id: str) -> int:
    """Number of direct subtasks currently attached to ``task_id``."""
    return len(await task_store.list_children(task_id))


async def ensure_can_attach(parent_id: str, task_id: str | None = None) -> None:
    """Validate that a task may be placed under ``parent_id``.

    Raises:
        TaskError: SUBTASK_CYCLE if the link forms a cycle, MAX_SUBTASKS if the
            parent already holds the configured maximum of subtasks
    """
    if await would_create_cycle(parent_id, task_id):
        raise TaskError.subtask_cycle(
            "Circular dependency detected in subtasks",
            details={"parent_task_id": parent_id, "task_id": task_id},
        )

    if settings.max_subtasks is not None and await count_subtasks(parent_id) >= settings.max_subtasks:
        raise TaskError.max_subtasks(
            f"Task {parent_id} already has the maximum of {settings.max_subtasks} subtasks",
            details={"parent_task_id": parent_id},
        )
