"""Task store adapter over the record-level database client.

Translates between ``Task`` models and stored records. Optional values are
stored as empty strings and tags as a comma-joined string; neither encoding
leaves this module. Database failures are re-raised as ``TaskError``: a
missing record becomes TASK_NOT_FOUND, anything else INTERNAL_ERROR.
"""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from src.core import db_client
from src.core.config import constants, settings
from src.core.errors import TaskError, TaskErrorCode
from src.domain.task import Task, ensure_utc


logger = logging.getLogger(__name__)

TaskPredicate = Callable[[Task], bool]


@contextmanager
def _store_errors(operation: str, *, task_id: str | None = None) -> Iterator[None]:
    try:
        yield
    except db_client.RecordNotFoundError as e:
        raise TaskError.not_found() from e
    except db_client.DatabaseError as e:
        logger.error("task_store_failed", extra={"operation": operation, "task_id": task_id, "error": str(e)})
        raise TaskError.internal("Task store unavailable") from e


def _encode_datetime(value: datetime | None) -> str:
    return value.isoformat() if value is not None else ""


def _decode_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def encode_tags(tags: list[str]) -> str:
    return constants.TAG_SEPARATOR.join(tags)


def decode_tags(value: str | None) -> list[str]:
    if not value:
        return []
    return [tag for tag in value.split(constants.TAG_SEPARATOR) if tag]


def _encode_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Convert Task-shaped fields to their stored representation."""
    data: dict[str, Any] = {}
    for key, value in fields.items():
        if key == "sub_task_ids":
            continue
        if key == "tags":
            data[key] = encode_tags(value or [])
        elif key in {"due_date", "completed_at"}:
            data[key] = _encode_datetime(value)
        elif key in {"description", "assigned_to_id", "parent_task_id"}:
            data[key] = value or ""
        elif hasattr(value, "value"):
            data[key] = value.value
        else:
            data[key] = value
    return data


def record_to_task(record: dict[str, Any]) -> Task:
    """Build a Task from a stored record."""
    return Task(
        id=record["id"],
        created_at=_decode_datetime(record["created"]),
        updated_at=_decode_datetime(record["updated"]),
        title=record["title"],
        description=record.get("description") or "",
        status=record["status"],
        priority=record["priority"],
        due_date=_decode_datetime(record.get("due_date")),
        completed_at=_decode_datetime(record.get("completed_at")),
        tags=decode_tags(record.get("tags")),
        creator_id=record["creator_id"],
        family_id=record["family_id"],
        assigned_to_id=record.get("assigned_to_id") or None,
        parent_task_id=record.get("parent_task_id") or None,
    )


async def get_task(task_id: str) -> Task | None:
    """Fetch a task by id, or None when it does not exist."""
    try:
        with _store_errors("get", task_id=task_id):
            record = await db_client.get_record(collection=constants.TASKS_COLLECTION, record_id=task_id)
    except TaskError as e:
        if e.code == TaskErrorCode.TASK_NOT_FOUND:
            return None
        raise
    return record_to_task(record)


async def create_task(draft: dict[str, Any]) -> Task:
    """Persist a new task. The store assigns ``id``, ``created_at`` and ``updated_at``."""
    with _store_errors("create"):
        record = await db_client.create_record(collection=constants.TASKS_COLLECTION, data=_encode_fields(draft))
    return record_to_task(record)


async def update_task(task_id: str, fields: dict[str, Any]) -> Task:
    """Apply ``fields`` to a task and return the refreshed task.

    Raises:
        TaskError: TASK_NOT_FOUND if the task does not exist
    """
    with _store_errors("update", task_id=task_id):
        record = await db_client.update_record(
            collection=constants.TASKS_COLLECTION,
            record_id=task_id,
            data=_encode_fields(fields),
        )
    return record_to_task(record)


async def delete_task(task_id: str) -> None:
    """Hard delete a task.

    Raises:
        TaskError: TASK_NOT_FOUND if the task does not exist
    """
    with _store_errors("delete", task_id=task_id):
        await db_client.delete_record(collection=constants.TASKS_COLLECTION, record_id=task_id)


async def query_tasks(*, filter_query: str = "", predicate: TaskPredicate | None = None) -> list[Task]:
    """Return every task matching ``filter_query`` and, if given, ``predicate``.

    Pages through the store until a short page is returned.
    """
    per_page = settings.default_per_page_limit
    tasks: list[Task] = []
    page = 1

    with _store_errors("query"):
        while True:
            records = await db_client.list_records(
                collection=constants.TASKS_COLLECTION,
                page=page,
                per_page=per_page,
                filter_query=filter_query,
                sort="created",
            )
            tasks.extend(record_to_task(record) for record in records)
            if len(records) < per_page:
                break
            page += 1

    if predicate is None:
        return tasks
    return [task for task in tasks if predicate(task)]


async def list_children(parent_id: str) -> list[Task]:
    """Direct subtasks of ``parent_id``."""
    return await query_tasks(filter_query=f'parent_task_id = "{db_client.sanitize_param(parent_id)}"')


async def children_by_parent() -> dict[str, list[str]]:
    """Map every task that has subtasks to its direct subtask ids, oldest first."""
    children: dict[str, list[str]] = {}
    for task in await query_tasks(filter_query='parent_task_id != ""'):
        if task.parent_task_id:
            children.setdefault(task.parent_task_id, []).append(task.id)
    return children


async def with_subtask_ids(task: Task) -> Task:
    """Return ``task`` with ``sub_task_ids`` filled from its current children."""
    children = await list_children(task.id)
    return task.model_copy(update={"sub_task_ids": [child.id for child in children]})


async def detach_children(parent_id: str) -> list[str]:
    """Clear ``parent_task_id`` on every direct subtask of ``parent_id``.

    Returns:
        Ids of the detached subtasks
    """
    detached = []
    for child in await list_children(parent_id):
        try:
            await update_task(child.id, {"parent_task_id": None})
        except TaskError as e:
            # Deleted concurrently; nothing left to detach
            if e.code != TaskErrorCode.TASK_NOT_FOUND:
                raise
            continue
        detached.append(child.id)
    return detached
