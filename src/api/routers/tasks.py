import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends

from api.dependencies import (
    get_current_user_id,
    get_settings,
    get_task_extractor,
    get_task_repository,
)
from api.routers.ai import ParseTodoIn, request_now
from extraction.task_extractor import TaskExtractor
from llm.llm_client import call_with_deadline
from storage.task_repository import TaskRepository
from temporal.resolver import align_to
from todo_ai.config import Settings
from todo_ai.errors import TaskNotFound
from todo_ai.models import Task, TaskCreate, TaskUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


def _localize(data, reference: datetime):
    """Naive due instants are wall-clock time in the zone of ``reference``."""
    if data.due_at is not None:
        data = data.model_copy(update={"due_at": align_to(data.due_at, reference)})
    return data


@router.get("/tasks", response_model=List[Task])
async def list_tasks(
    user_id: str = Depends(get_current_user_id),
    repository: TaskRepository = Depends(get_task_repository),
) -> List[Task]:
    return await repository.list_tasks(user_id)


@router.post("/tasks", response_model=Task, status_code=201)
async def create_task(
    payload: TaskCreate,
    user_id: str = Depends(get_current_user_id),
    repository: TaskRepository = Depends(get_task_repository),
    settings: Settings = Depends(get_settings),
) -> Task:
    task = await repository.create_task(user_id, _localize(payload, settings.now()))
    logger.info(f"Created task {task.id} for {user_id}")
    return task


@router.patch("/tasks/{task_id}", response_model=Task)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    user_id: str = Depends(get_current_user_id),
    repository: TaskRepository = Depends(get_task_repository),
    settings: Settings = Depends(get_settings),
) -> Task:
    task = await repository.update_task(user_id, task_id, _localize(payload, settings.now()))
    if task is None:
        raise TaskNotFound(task_id)
    return task


@router.post("/tasks/{task_id}/toggle", response_model=Task)
async def toggle_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: TaskRepository = Depends(get_task_repository),
) -> Task:
    current = await repository.get_task(user_id, task_id)
    if current is None:
        raise TaskNotFound(task_id)
    task = await repository.update_task(
        user_id, task_id, TaskUpdate(completed=not current.completed)
    )
    if task is None:
        raise TaskNotFound(task_id)
    return task


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    repository: TaskRepository = Depends(get_task_repository),
) -> None:
    if not await repository.delete_task(user_id, task_id):
        raise TaskNotFound(task_id)
    logger.info(f"Deleted task {task_id} for {user_id}")


@router.post("/tasks/from-text", response_model=Task, status_code=201)
async def create_task_from_text(
    payload: ParseTodoIn,
    user_id: str = Depends(get_current_user_id),
    repository: TaskRepository = Depends(get_task_repository),
    extractor: TaskExtractor = Depends(get_task_extractor),
    settings: Settings = Depends(get_settings),
) -> Task:
    """Extract fields from free text and store the result as a new task."""
    now = request_now(payload.now, settings)
    result = await call_with_deadline(
        extractor.extract, payload.text, now, deadline_s=settings.llm_timeout_s
    )
    task = await repository.create_task(user_id, _localize(result.to_task_create(), now))
    logger.info(f"Created task {task.id} from text for {user_id}")
    return task
