"""Task lifecycle service: create, read, update and delete family tasks.

Every operation checks existence first (TASK_NOT_FOUND), then access
(FORBIDDEN), then validates input before touching the store. Parent-link
checks and the write that follows are separate store calls, so a parent
deleted in between is not detected. Deleting a task detaches its children
before the delete; if the delete then fails the children are re-attached,
and if that also fails they stay detached from a parent that still exists.
"""

import logging
from datetime import UTC, datetime
from typing import Any, TypeVar

from pydantic import ValidationError

from src.core.errors import TaskError, TaskErrorCode
from src.core.logging import log_with_user_context, span
from src.domain.create_models import TaskCreate
from src.domain.filters import TaskFilters, TaskSort
from src.domain.task import Task
from src.domain.update_models import TaskUpdate
from src.domain.user import UserContext
from src.services import access_policy, hierarchy_service, task_query_service, task_store


logger = logging.getLogger(__name__)

PayloadT = TypeVar("PayloadT", TaskCreate, TaskUpdate)


def _require_user(user: UserContext | None) -> UserContext:
    if user is None:
        raise TaskError.unauthorized("Authentication required")
    return user


def _parse_payload(model: type[PayloadT], data: PayloadT | dict[str, Any]) -> PayloadT:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise TaskError.from_validation_error(e) from e


def _ensure_future(due_date: datetime | None) -> None:
    if due_date is not None and due_date <= datetime.now(UTC):
        raise TaskError(
            TaskErrorCode.PAST_DUE_DATE,
            "Due date cannot be in the past",
            details={"due_date": due_date.isoformat()},
        )


async def _load_task(task_id: str) -> Task:
    task = await task_store.get_task(task_id)
    if task is None:
        raise TaskError.not_found(details={"task_id": task_id})
    return task


async def _validate_parent(user: UserContext, parent_id: str, task_id: str | None = None) -> None:
    """Check that ``parent_id`` exists, is writable by the user, and keeps the hierarchy acyclic."""
    parent = await task_store.get_task(parent_id)
    if parent is None:
        raise TaskError.not_found("Parent task not found", details={"parent_task_id": parent_id})
    access_policy.ensure_can_write(user, parent, action="add subtasks to")
    await hierarchy_service.ensure_can_attach(parent_id, task_id)


async def create_task(*, user: UserContext | None, data: TaskCreate | dict[str, Any]) -> Task:
    """Create a task in the user's family.

    Args:
        user: Authenticated user; becomes the creator and default assignee
        data: TaskCreate payload or the raw request body

    Returns:
        The persisted task

    Raises:
        TaskError: VALIDATION_ERROR, INVALID_STATUS, INVALID_PRIORITY,
            PAST_DUE_DATE, TASK_NOT_FOUND (parent), FORBIDDEN (parent),
            SUBTASK_CYCLE, MAX_SUBTASKS, FAMILY_NOT_FOUND, UNAUTHORIZED
    """
    with span("task_service.create_task"):
        user = _require_user(user)
        if not user.family_id:
            raise TaskError(TaskErrorCode.FAMILY_NOT_FOUND, "User does not belong to a family", entity="FAMILY")

        payload = _parse_payload(TaskCreate, data)
        _ensure_future(payload.due_date)

        if payload.parent_task_id:
            await _validate_parent(user, payload.parent_task_id)

        draft = payload.model_dump()
        draft["description"] = payload.description or ""
        draft["assigned_to_id"] = payload.assigned_to_id or user.id
        draft["creator_id"] = user.id
        draft["family_id"] = user.family_id

        task = await task_store.create_task(draft)

        log_with_user_context(
            logger,
            "info",
            "Created task",
            user_id=user.id,
            task_id=task.id,
            family_id=task.family_id,
            parent_task_id=task.parent_task_id,
        )
        return task


async def get_task(*, user: UserContext | None, task_id: str) -> Task:
    """Fetch a single task the user may read, with its direct subtask ids.

    Raises:
        TaskError: TASK_NOT_FOUND if absent, FORBIDDEN without read access
    """
    with span("task_service.get_task"):
        user = _require_user(user)
        task = await _load_task(task_id)
        access_policy.ensure_can_read(user, task)
        return await task_store.with_subtask_ids(task)


async def list_family_tasks(
    *,
    user: UserContext | None,
    family_id: str,
    filters: TaskFilters | None = None,
    sort: TaskSort | None = None,
) -> list[Task]:
    """List a family's tasks for one of its members.

    Raises:
        TaskError: FORBIDDEN unless the user belongs to ``family_id``
    """
    with span("task_service.list_family_tasks"):
        user = _require_user(user)
        if not access_policy.can_access_family(user, family_id):
            raise TaskError.forbidden(
                "You do not have access to this family's tasks",
                details={"family_id": family_id},
            )
        return await task_query_service.list_family_tasks(family_id, filters, sort)


async def list_my_tasks(*, user: UserContext | None) -> list[Task]:
    """List tasks the user created or is assigned to."""
    with span("task_service.list_my_tasks"):
        user = _require_user(user)
        return await task_query_service.list_user_tasks(user.id)


async def update_task(*, user: UserContext | None, task_id: str, data: TaskUpdate | dict[str, Any]) -> Task:
    """Apply a partial update to a task.

    Fields omitted from ``data`` are left untouched. The parent link is only
    re-validated when it changes to a new, non-null value.

    Raises:
        TaskError: TASK_NOT_FOUND, FORBIDDEN, VALIDATION_ERROR, INVALID_STATUS,
            INVALID_PRIORITY, PAST_DUE_DATE, SUBTASK_CYCLE, MAX_SUBTASKS
    """
    with span("task_service.update_task"):
        user = _require_user(user)
        existing = await _load_task(task_id)
        access_policy.ensure_can_write(user, existing, action="update")

        payload = _parse_payload(TaskUpdate, data)
        changes = payload.changes()
        if not changes:
            return await task_store.with_subtask_ids(existing)

        _ensure_future(payload.due_date)

        new_parent = changes.get("parent_task_id")
        if new_parent and new_parent != existing.parent_task_id:
            await _validate_parent(user, new_parent, task_id)

        task = await task_store.update_task(task_id, changes)

        log_with_user_context(
            logger,
            "info",
            "Updated task",
            user_id=user.id,
            task_id=task_id,
            fields=sorted(changes),
        )
        return await task_store.with_subtask_ids(task)


async def delete_task(*, user: UserContext | None, task_id: str) -> list[str]:
    """Hard delete a task.

    Direct subtasks are detached (their parent link is cleared) so no live
    task keeps pointing at the deleted one. If the delete itself fails, the
    detached subtasks are linked back to the task before the error is raised.

    Returns:
        Ids of the subtasks that were detached

    Raises:
        TaskError: TASK_NOT_FOUND if absent, FORBIDDEN without write access,
            INTERNAL_ERROR if the store fails
    """
    with span("task_service.delete_task"):
        user = _require_user(user)
        task = await _load_task(task_id)
        access_policy.ensure_can_write(user, task, action="delete")

        detached = await task_store.detach_children(task_id)
        try:
            await task_store.delete_task(task_id)
        except TaskError:
            logger.warning("Delete failed, re-attaching subtasks", extra={"task_id": task_id, "subtasks": detached})
            for child_id in detached:
                await task_store.update_task(child_id, {"parent_task_id": task_id})
            raise

        log_with_user_context(
            logger,
            "info",
            "Deleted task",
            user_id=user.id,
            task_id=task_id,
            detached_subtasks=detached,
        )
        return detached
