import asyncio
from datetime import datetime

import pytest

from storage.task_repository import InMemoryTaskRepository, PostgresTaskRepository
from todo_ai.errors import StoreError
from todo_ai.models import TaskCreate, TaskUpdate


def test_crud_is_scoped_to_owner():
    repo = InMemoryTaskRepository()

    async def scenario():
        task = await repo.create_task("u1", TaskCreate(title="Buy milk"))
        assert await repo.get_task("u2", task.id) is None
        assert await repo.list_tasks("u2") == []
        assert await repo.update_task("u2", task.id, TaskUpdate(completed=True)) is None
        assert await repo.delete_task("u2", task.id) is False
        assert [t.title for t in await repo.list_tasks("u1")] == ["Buy milk"]

    asyncio.run(scenario())


def test_update_applies_only_explicit_fields():
    repo = InMemoryTaskRepository()

    async def scenario():
        task = await repo.create_task(
            "u1",
            TaskCreate(title="Report", description="Q3", priority="high",
                       due_at=datetime(2026, 10, 22, 9, 0)),
        )
        updated = await repo.update_task("u1", task.id, TaskUpdate(completed=True))
        assert updated.completed is True
        assert updated.priority == "high"
        assert updated.description == "Q3"
        assert updated.updated_at is not None

        # explicit null clears nullable fields but cannot blank required ones
        cleared = await repo.update_task(
            "u1", task.id, TaskUpdate.model_validate({"due_at": None, "title": None})
        )
        assert cleared.due_at is None
        assert cleared.title == "Report"

    asyncio.run(scenario())


def test_list_is_newest_first():
    repo = InMemoryTaskRepository()

    async def scenario():
        await repo.create_task("u1", TaskCreate(title="first"))
        await repo.create_task("u1", TaskCreate(title="second"))
        return [t.title for t in await repo.list_tasks("u1")]

    assert asyncio.run(scenario()) == ["second", "first"]


def test_delete():
    repo = InMemoryTaskRepository()

    async def scenario():
        task = await repo.create_task("u1", TaskCreate(title="gone soon"))
        assert await repo.delete_task("u1", task.id) is True
        assert await repo.get_task("u1", task.id) is None

    asyncio.run(scenario())


def test_postgres_store_without_pool_raises_store_error():
    # no USE_DATABASE startup ran, so storage.db has no pool
    with pytest.raises(StoreError):
        asyncio.run(PostgresTaskRepository().list_tasks("u1"))
