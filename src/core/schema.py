"""SQLite schema management (code-first approach)."""

import logging

from src.core import db_client
from src.core.config import constants


logger = logging.getLogger(__name__)


# Central list of all collections in the schema
COLLECTIONS = [
    constants.TASKS_COLLECTION,
]

# Optional values are stored as empty strings rather than NULL so that
# filter comparisons such as parent_task_id != "" behave the same in every backend.
_TABLES: dict[str, str] = {
    constants.TASKS_COLLECTION: """
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            created TEXT NOT NULL,
            updated TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'PENDING'
                CHECK (status IN ('PENDING', 'IN_PROGRESS', 'COMPLETED', 'CANCELLED')),
            priority TEXT NOT NULL DEFAULT 'MEDIUM'
                CHECK (priority IN ('LOW', 'MEDIUM', 'HIGH', 'URGENT')),
            due_date TEXT NOT NULL DEFAULT '',
            completed_at TEXT NOT NULL DEFAULT '',
            tags TEXT NOT NULL DEFAULT '',
            creator_id TEXT NOT NULL,
            family_id TEXT NOT NULL,
            assigned_to_id TEXT NOT NULL DEFAULT '',
            parent_task_id TEXT NOT NULL DEFAULT ''
        )
    """,
}

_INDEXES: list[str] = [
    "CREATE INDEX IF NOT EXISTS idx_tasks_family ON tasks (family_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_parent ON tasks (parent_task_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_assignee ON tasks (assigned_to_id)",
    "CREATE INDEX IF NOT EXISTS idx_tasks_creator ON tasks (creator_id)",
]


async def init_db(*, db_path: str | None = None) -> None:
    """Create all tables and indexes if they do not exist yet."""
    conn = await db_client.get_connection(db_path=db_path)

    for collection in COLLECTIONS:
        await conn.execute(_TABLES[collection])
        logger.info("Ensured table", extra={"collection": collection})

    for statement in _INDEXES:
        await conn.execute(statement)

    await conn.commit()
    logger.info("Database schema initialized", extra={"db_path": str(db_client.get_db_path(db_path))})
