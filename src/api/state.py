from typing import Optional

from llm.llm_client import LLMClient
from storage.task_repository import TaskRepository
from todo_ai.config import Settings

settings: Settings = Settings.from_env()

# Global instances initialized at startup (or lazily on first use)
task_repository: Optional[TaskRepository] = None
llm_client: Optional[LLMClient] = None
