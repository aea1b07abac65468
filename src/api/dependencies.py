from typing import Optional

from fastapi import Depends, Header, HTTPException

from api import state
from extraction.task_extractor import TaskExtractor
from llm.llm_client import LLMClient, get_provider
from storage.task_repository import InMemoryTaskRepository, TaskRepository
from summary.summarizer import Summarizer
from todo_ai.config import Settings


def get_settings() -> Settings:
    return state.settings


def get_current_user_id(
    x_user_id: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Identity comes from the upstream auth layer; it is trusted as-is."""
    user_id = (x_user_id or "").strip() or settings.default_user_id
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return user_id


def get_task_repository() -> TaskRepository:
    if state.task_repository is None:
        state.task_repository = InMemoryTaskRepository()
    return state.task_repository


def get_llm_client(settings: Settings = Depends(get_settings)) -> LLMClient:
    if state.llm_client is None:
        state.llm_client = LLMClient(
            provider=get_provider(settings.llm_provider, timeout_s=settings.llm_timeout_s)
        )
    return state.llm_client


def get_task_extractor(llm_client: LLMClient = Depends(get_llm_client)) -> TaskExtractor:
    return TaskExtractor(llm_client=llm_client)


def get_summarizer(
    repository: TaskRepository = Depends(get_task_repository),
    llm_client: LLMClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings),
) -> Summarizer:
    return Summarizer(
        repository=repository,
        llm_client=llm_client,
        deadline_s=settings.llm_timeout_s,
    )
