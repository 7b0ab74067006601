"""Filter and sort engine for task listings."""

import logging
from collections.abc import Collection, Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from src.core import db_client
from src.core.errors import TaskError, TaskErrorCode
from src.core.logging import span
from src.domain.filters import SortField, SortOrder, TaskFilters, TaskSort
from src.domain.task import Task
from src.services import task_store


logger = logging.getLogger(__name__)

# Query-string keys understood by parse_query_params
_FILTER_PARAMS = {"status", "priority", "assigned_to_id", "tags", "parent_task_id", "has_subtasks", "due_date"}
_SORT_PARAMS = {"sort_by", "order"}

# camelCase spellings used by existing API clients
_PARAM_ALIASES = {
    "assignedToId": "assigned_to_id",
    "parentTaskId": "parent_task_id",
    "hasSubtasks": "has_subtasks",
    "dueDate": "due_date",
    "sortBy": "sort_by",
}
_SORT_FIELD_ALIASES = {"dueDate": "due_date", "createdAt": "created_at"}

_LIST_ERROR_CODES = {
    "status": TaskErrorCode.INVALID_STATUS,
    "priority": TaskErrorCode.INVALID_PRIORITY,
    "tags": TaskErrorCode.VALIDATION_ERROR,
}

_LATEST = datetime.max.replace(tzinfo=UTC)


def _split_csv(key: str, value: str) -> list[str]:
    """Split a comma-separated list, rejecting empty items such as ``a,,b`` or ``,``."""
    items = [part.strip() for part in value.split(",")]
    if not all(items):
        raise TaskError(
            _LIST_ERROR_CODES[key],
            f"Invalid {key} value: empty item in '{value}'",
            details={key: value},
        )
    return items


def _normalize_keys(params: Mapping[str, str]) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for key, value in params.items():
        name = _PARAM_ALIASES.get(key, key)
        if name in normalized:
            raise TaskError.validation(f"Query parameter given twice: {name}")
        normalized[name] = value
    return normalized


def parse_query_params(params: Mapping[str, str]) -> tuple[TaskFilters, TaskSort | None]:
    """Build filter and sort requests from raw query-string values.

    ``status``, ``priority`` and ``tags`` are comma-separated lists;
    ``has_subtasks`` must be ``true`` or ``false``; ``due_date`` is
    ``start,end`` where either side may be empty. The camelCase keys
    ``assignedToId``, ``parentTaskId``, ``hasSubtasks``, ``dueDate`` and
    ``sortBy`` (with ``dueDate``/``createdAt`` values) are accepted too.
    Empty values are treated as absent.

    Raises:
        TaskError: VALIDATION_ERROR (or INVALID_STATUS / INVALID_PRIORITY) for
            unknown keys or values
    """
    params = _normalize_keys(params)
    unknown = set(params) - _FILTER_PARAMS - _SORT_PARAMS
    if unknown:
        raise TaskError.validation(f"Unknown query parameters: {', '.join(sorted(unknown))}")

    raw_filters: dict[str, Any] = {}
    for key in ("status", "priority", "tags"):
        if params.get(key):
            raw_filters[key] = _split_csv(key, params[key])

    for key in ("assigned_to_id", "parent_task_id"):
        if params.get(key):
            raw_filters[key] = params[key].strip()

    if params.get("has_subtasks"):
        flag = params["has_subtasks"].strip().lower()
        if flag not in {"true", "false"}:
            raise TaskError.validation("has_subtasks must be 'true' or 'false'")
        raw_filters["has_subtasks"] = flag == "true"

    if params.get("due_date"):
        start, _, end = params["due_date"].partition(",")
        raw_filters["due_date"] = {"start": start.strip() or None, "end": end.strip() or None}

    raw_sort = {key: params[key].strip() for key in _SORT_PARAMS if params.get(key)}
    if "sort_by" in raw_sort:
        raw_sort["sort_by"] = _SORT_FIELD_ALIASES.get(raw_sort["sort_by"], raw_sort["sort_by"])

    try:
        filters = TaskFilters.model_validate(raw_filters)
        sort = TaskSort.model_validate(raw_sort) if raw_sort else None
    except ValidationError as e:
        raise TaskError.from_validation_error(e) from e

    return filters, sort


def matches_filters(task: Task, filters: TaskFilters, parents: Collection[str] | None = None) -> bool:
    """Return True if ``task`` satisfies every supplied filter.

    Args:
        task: Task to test
        filters: Conjunctive filter request
        parents: Ids of tasks that have subtasks; required for ``has_subtasks``
    """
    if filters.status is not None and task.status not in filters.status:
        return False
    if filters.priority is not None and task.priority not in filters.priority:
        return False
    if filters.assigned_to_id is not None and task.assigned_to_id != filters.assigned_to_id:
        return False
    if filters.tags and not filters.tags.issubset(task.tags):
        return False
    if filters.parent_task_id is not None and task.parent_task_id != filters.parent_task_id:
        return False
    if filters.has_subtasks is not None and (task.id in (parents or set())) != filters.has_subtasks:
        return False
    return not (filters.due_date is not None and not filters.due_date.contains(task.due_date))


def _default_key(task: Task) -> tuple[int, bool, datetime, datetime]:
    return (task.priority.rank, task.due_date is None, task.due_date or _LATEST, task.created_at)


def sort_tasks(tasks: Iterable[Task], sort: TaskSort | None = None) -> list[Task]:
    """Order tasks.

    Without an explicit request: priority rank ascending (LOW first), then due
    date ascending with missing due dates last. An explicit ``sort_by`` is
    applied first and ties fall back to that default. Missing due dates sort
    last in either direction.
    """
    ordered = sorted(tasks, key=_default_key)
    if sort is None:
        return ordered

    reverse = sort.order == SortOrder.DESC
    if sort.sort_by == SortField.PRIORITY:
        return sorted(ordered, key=lambda t: t.priority.rank, reverse=reverse)
    if sort.sort_by == SortField.CREATED_AT:
        return sorted(ordered, key=lambda t: t.created_at, reverse=reverse)

    dated = sorted((t for t in ordered if t.due_date is not None), key=lambda t: t.due_date, reverse=reverse)
    return dated + [t for t in ordered if t.due_date is None]


def _attach_subtask_ids(tasks: Iterable[Task], children: Mapping[str, list[str]]) -> list[Task]:
    return [task.model_copy(update={"sub_task_ids": list(children.get(task.id, []))}) for task in tasks]


async def list_family_tasks(
    family_id: str,
    filters: TaskFilters | None = None,
    sort: TaskSort | None = None,
) -> list[Task]:
    """Select and order a family's tasks, each carrying its direct subtask ids.

    Access has already been checked by the caller.
    """
    filters = filters or TaskFilters()

    with span("task_query_service.list_family_tasks"):
        children = await task_store.children_by_parent()
        tasks = await task_store.query_tasks(
            filter_query=f'family_id = "{db_client.sanitize_param(family_id)}"',
            predicate=lambda task: matches_filters(task, filters, children),
        )
        result = _attach_subtask_ids(sort_tasks(tasks, sort), children)

        logger.debug(
            "Listed family tasks",
            extra={"family_id": family_id, "count": len(result), "filters": filters.model_dump(exclude_none=True)},
        )
        return result


async def list_user_tasks(user_id: str) -> list[Task]:
    """Tasks the user created or is assigned to, in default order."""
    with span("task_query_service.list_user_tasks"):
        safe_id = db_client.sanitize_param(user_id)
        children = await task_store.children_by_parent()
        tasks = await task_store.query_tasks(filter_query=f'(creator_id = "{safe_id}" || assigned_to_id = "{safe_id}")')
        return _attach_subtask_ids(sort_tasks(tasks), children)
