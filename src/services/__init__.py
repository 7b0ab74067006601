from src.services import (
    access_policy,
    hierarchy_service,
    task_query_service,
    task_service,
    task_store,
)


__all__ = [
    "access_policy",
    "hierarchy_service",
    "task_query_service",
    "task_service",
    "task_store",
]
