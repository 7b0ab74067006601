"""End-to-end task workflows against a real SQLite database."""

import pytest

from src.core import db_client
from src.core.errors import TaskError, TaskErrorCode
from src.domain.filters import TaskFilters
from src.domain.task import TaskStatus
from src.domain.user import UserContext, UserRole
from src.services import task_service


@pytest.mark.integration
class TestSqliteRecords:
    async def test_crud_round_trip(self, sqlite_db):
        created = await db_client.create_record(
            collection="tasks",
            data={"title": "Dishes", "creator_id": "u1", "family_id": "f1"},
        )

        assert created["status"] == "PENDING"
        assert created["parent_task_id"] == ""

        updated = await db_client.update_record(collection="tasks", record_id=created["id"], data={"title": "Pots"})
        assert updated["title"] == "Pots"
        assert updated["created"] == created["created"]

        await db_client.delete_record(collection="tasks", record_id=created["id"])
        with pytest.raises(db_client.RecordNotFoundError):
            await db_client.get_record(collection="tasks", record_id=created["id"])

    async def test_missing_record_operations(self, sqlite_db):
        with pytest.raises(db_client.RecordNotFoundError):
            await db_client.update_record(collection="tasks", record_id="missing", data={"title": "x"})
        with pytest.raises(db_client.RecordNotFoundError):
            await db_client.delete_record(collection="tasks", record_id="missing")

    async def test_check_constraint_rejects_unknown_status(self, sqlite_db):
        with pytest.raises(db_client.DatabaseError):
            await db_client.create_record(
                collection="tasks",
                data={"title": "x", "creator_id": "u1", "family_id": "f1", "status": "DONE"},
            )

    async def test_filters_and_pagination(self, sqlite_db):
        for i in range(5):
            await db_client.create_record(
                collection="tasks",
                data={"title": f"task {i}", "creator_id": "u1", "family_id": "f1" if i % 2 == 0 else "f2"},
            )

        family_one = await db_client.list_records(collection="tasks", filter_query='family_id = "f1"')
        page_two = await db_client.list_records(collection="tasks", page=2, per_page=2, sort="title")
        like = await db_client.list_records(collection="tasks", filter_query='title ~ "task 3"')
        either = await db_client.list_records(
            collection="tasks", filter_query='(title = "task 0" || title = "task 1")', sort="-title"
        )

        assert len(family_one) == 3
        assert [r["title"] for r in page_two] == ["task 2", "task 3"]
        assert [r["title"] for r in like] == ["task 3"]
        assert [r["title"] for r in either] == ["task 1", "task 0"]

    async def test_like_filter_escapes_wildcards(self, sqlite_db):
        for title in ("100% done", "100 done"):
            await db_client.create_record(
                collection="tasks", data={"title": title, "creator_id": "u", "family_id": "f"}
            )

        records = await db_client.list_records(collection="tasks", filter_query='title ~ "100%"')

        assert [r["title"] for r in records] == ["100% done"]

    @pytest.mark.parametrize("family_id", ["o'brien", 'fam"x', "back\\slash"])
    async def test_filter_values_with_quotes(self, sqlite_db, family_id):
        for title, family in (("ours", family_id), ("decoy", "fam\\")):
            await db_client.create_record(
                collection="tasks", data={"title": title, "creator_id": "u", "family_id": family}
            )

        records = await db_client.list_records(
            collection="tasks", filter_query=f'family_id = "{db_client.sanitize_param(family_id)}"'
        )

        assert [r["title"] for r in records] == ["ours"]


@pytest.mark.integration
class TestTaskWorkflows:
    async def test_subtask_lifecycle(self, sqlite_db, parent_user, child_user, future):
        a = await task_service.create_task(user=parent_user, data={"title": "Plan trip", "due_date": future(days=7)})
        b = await task_service.create_task(
            user=child_user, data={"title": "Book hotel", "parent_task_id": a.id, "tags": ["travel"]}
        )

        assert a.status == TaskStatus.PENDING
        assert b.parent_task_id == a.id
        assert b.assigned_to_id == child_user.id

        with pytest.raises(TaskError) as exc_info:
            await task_service.update_task(user=parent_user, task_id=a.id, data={"parent_task_id": b.id})
        assert exc_info.value.code == TaskErrorCode.SUBTASK_CYCLE

        parents = await task_service.list_family_tasks(
            user=parent_user, family_id=parent_user.family_id, filters=TaskFilters(has_subtasks=True)
        )
        assert [t.id for t in parents] == [a.id]

        tagged = await task_service.list_family_tasks(
            user=parent_user, family_id=parent_user.family_id, filters=TaskFilters(tags={"travel"})
        )
        assert [t.id for t in tagged] == [b.id]

        detached = await task_service.delete_task(user=parent_user, task_id=a.id)
        assert detached == [b.id]

        orphan = await task_service.get_task(user=parent_user, task_id=b.id)
        assert orphan.parent_task_id is None
        assert orphan.tags == ["travel"]

    async def test_invalid_status_does_not_touch_row(self, sqlite_db, parent_user):
        task = await task_service.create_task(user=parent_user, data={"title": "Dishes"})

        with pytest.raises(TaskError) as exc_info:
            await task_service.update_task(user=parent_user, task_id=task.id, data={"status": "DONE"})

        assert exc_info.value.code == TaskErrorCode.INVALID_STATUS
        assert await task_service.get_task(user=parent_user, task_id=task.id) == task

    async def test_outsider_cannot_see_family_tasks(self, sqlite_db, parent_user, outsider_user):
        task = await task_service.create_task(user=parent_user, data={"title": "Private"})

        with pytest.raises(TaskError) as exc_info:
            await task_service.get_task(user=outsider_user, task_id=task.id)
        assert exc_info.value.code == TaskErrorCode.FORBIDDEN

        assert await task_service.list_my_tasks(user=outsider_user) == []

    @pytest.mark.parametrize(("user_id", "family_id"), [("d'arcy", "o'brien"), ('user"x', 'fam"x')])
    async def test_quoted_ids_in_listings(self, sqlite_db, user_id, family_id):
        user = UserContext(id=user_id, role=UserRole.PARENT, family_id=family_id)
        decoy = UserContext(id="user\\", role=UserRole.PARENT, family_id="fam\\")
        parent = await task_service.create_task(user=user, data={"title": "Garden"})
        child = await task_service.create_task(user=user, data={"title": "Weed", "parent_task_id": parent.id})
        await task_service.create_task(user=decoy, data={"title": "Elsewhere"})

        family = await task_service.list_family_tasks(user=user, family_id=family_id)
        mine = await task_service.list_my_tasks(user=user)
        loaded = await task_service.get_task(user=user, task_id=parent.id)

        assert sorted(t.title for t in family) == ["Garden", "Weed"]
        assert sorted(t.title for t in mine) == ["Garden", "Weed"]
        assert loaded.sub_task_ids == [child.id]
