"""family-tasks - task core for shared family task lists.

Bootstraps observability and the SQLite task store. Transport adapters import
``src.services.task_service`` after calling ``startup()``.
"""

import asyncio
import logging
import sys

from src.core import db_client
from src.core.config import settings
from src.core.logging import configure_logfire


logger = logging.getLogger(__name__)


async def check_database_connectivity() -> None:
    """Verify the task database is reachable and its schema is in place.

    Raises:
        ConnectionError: If the database cannot be opened or queried
    """
    try:
        await db_client.list_records(collection="tasks", per_page=1)
        logger.info("startup_validation", extra={"service": "sqlite", "status": "ok"})
    except db_client.DatabaseError as e:
        logger.error("startup_validation", extra={"service": "sqlite", "status": "failed", "error": str(e)})
        raise ConnectionError(f"Task database check failed: {e}") from e


async def validate_startup_configuration() -> None:
    """Validate the hierarchy limits and database connectivity, exiting on failure."""
    logger.info("startup_validation_begin")

    try:
        if settings.max_subtasks is not None and settings.max_subtasks > settings.max_hierarchy_depth:
            logger.warning(
                "startup_validation",
                extra={
                    "stage": "limits",
                    "max_subtasks": settings.max_subtasks,
                    "max_hierarchy_depth": settings.max_hierarchy_depth,
                },
            )

        await check_database_connectivity()
        logger.info("startup_validation_complete", extra={"status": "ok"})

    except ConnectionError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\nStartup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


async def startup() -> None:
    """Configure logging, create the schema and validate the environment."""
    # Configure logging first so validation logs are captured
    configure_logfire()

    await db_client.init_db()
    logger.info("Database initialized", extra={"db_path": str(db_client.get_db_path())})

    await validate_startup_configuration()


async def shutdown() -> None:
    await db_client.close_connection()


async def _run() -> None:
    await startup()
    await shutdown()


def main() -> None:
    """Initialize the task database and exit; used for first-time setup."""
    asyncio.run(_run())


if __name__ == "__main__":
    main()
