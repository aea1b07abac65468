"""
Record store adapters for the Task collection.

All reads and writes are scoped to an owner id. The summary pipeline only
ever calls ``list_tasks`` and treats the result as an immutable snapshot.
"""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, List, Optional

import asyncpg

from storage import db
from todo_ai.errors import StoreError
from todo_ai.models import Task, TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)


class TaskRepository(ABC):

    @abstractmethod
    async def list_tasks(self, owner_id: str) -> List[Task]:
        """All of the owner's tasks, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    async def create_task(self, owner_id: str, data: TaskCreate) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def update_task(self, owner_id: str, task_id: str, changes: TaskUpdate) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    async def delete_task(self, owner_id: str, task_id: str) -> bool:
        raise NotImplementedError


class InMemoryTaskRepository(TaskRepository):
    """Process-local store for development and tests."""

    def __init__(self, tasks: Optional[List[Task]] = None):
        self._tasks: Dict[str, Task] = {t.id: t for t in (tasks or [])}

    async def list_tasks(self, owner_id: str) -> List[Task]:
        # reversed insertion order keeps same-instant creations newest first
        owned = [t for t in reversed(list(self._tasks.values())) if t.owner_id == owner_id]
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(
            owned,
            key=lambda t: _sort_key(t.created_at) if t.created_at else epoch,
            reverse=True,
        )

    async def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return None
        return task

    async def create_task(self, owner_id: str, data: TaskCreate) -> Task:
        task = Task(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            created_at=datetime.now(timezone.utc),
            **data.model_dump(),
        )
        self._tasks[task.id] = task
        return task

    async def update_task(self, owner_id: str, task_id: str, changes: TaskUpdate) -> Optional[Task]:
        task = await self.get_task(owner_id, task_id)
        if task is None:
            return None
        patch = changes.changes()
        patch["updated_at"] = datetime.now(timezone.utc)
        updated = Task.model_validate({**task.model_dump(), **patch})
        self._tasks[task_id] = updated
        return updated

    async def delete_task(self, owner_id: str, task_id: str) -> bool:
        if await self.get_task(owner_id, task_id) is None:
            return False
        del self._tasks[task_id]
        return True


def _sort_key(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


def _task_from_record(record) -> Task:
    return Task(
        id=str(record["id"]),
        owner_id=str(record["user_id"]),
        title=record["title"],
        description=record["description"],
        priority=record["priority"],
        category=record["category"],
        completed=record["completed"],
        due_at=record["due_date"],
        created_at=record["created_at"],
        updated_at=record["updated_at"],
    )


_COLUMNS = "id, user_id, title, description, priority, category, completed, due_date, created_at, updated_at"

# TaskUpdate field -> todos column
_UPDATABLE = {
    "title": "title",
    "description": "description",
    "priority": "priority",
    "category": "category",
    "completed": "completed",
    "due_at": "due_date",
}


class PostgresTaskRepository(TaskRepository):
    """asyncpg-backed store over the ``todos`` table (see storage/schema.sql)."""

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[asyncpg.Connection]:
        try:
            async with db.get_connection() as conn:
                yield conn
        except (asyncpg.PostgresError, OSError, RuntimeError) as e:
            logger.error(f"Task store error: {e}")
            raise StoreError(str(e)) from e

    async def list_tasks(self, owner_id: str) -> List[Task]:
        async with self._connection() as conn:
            rows = await conn.fetch(
                f"SELECT {_COLUMNS} FROM todos WHERE user_id = $1 ORDER BY created_at DESC",
                owner_id,
            )
        return [_task_from_record(r) for r in rows]

    async def get_task(self, owner_id: str, task_id: str) -> Optional[Task]:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM todos WHERE id = $1 AND user_id = $2",
                task_id,
                owner_id,
            )
        return _task_from_record(row) if row else None

    async def create_task(self, owner_id: str, data: TaskCreate) -> Task:
        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO todos (id, user_id, title, description, priority, category, completed, due_date)
                VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
                RETURNING {_COLUMNS}
                """,
                str(uuid.uuid4()),
                owner_id,
                data.title,
                data.description,
                data.priority,
                data.category,
                data.completed,
                data.due_at,
            )
        return _task_from_record(row)

    async def update_task(self, owner_id: str, task_id: str, changes: TaskUpdate) -> Optional[Task]:
        patch = changes.changes()
        if not patch:
            return await self.get_task(owner_id, task_id)

        assignments = []
        args = []
        for i, (name, value) in enumerate(patch.items(), start=3):
            assignments.append(f"{_UPDATABLE[name]} = ${i}")
            args.append(value)

        async with self._connection() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE todos SET {', '.join(assignments)}, updated_at = NOW()
                WHERE id = $1 AND user_id = $2
                RETURNING {_COLUMNS}
                """,
                task_id,
                owner_id,
                *args,
            )
        return _task_from_record(row) if row else None

    async def delete_task(self, owner_id: str, task_id: str) -> bool:
        async with self._connection() as conn:
            status = await conn.execute(
                "DELETE FROM todos WHERE id = $1 AND user_id = $2",
                task_id,
                owner_id,
            )
        return status.endswith(" 1")
