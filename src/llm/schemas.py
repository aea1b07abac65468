from __future__ import annotations
from typing import Any, Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator

from todo_ai.models import Summary


class ParsedTodo(BaseModel):
    """
    The model's raw guess for a single todo.

    Deliberately loose: field-level defects are repaired by the post-processor,
    so anything that is not a usable scalar collapses to None here.
    """
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[str] = None
    category: Optional[str] = None
    due_date: Optional[str] = None
    due_time: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def scalar_to_str(cls, v: Any) -> Optional[str]:
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return str(v)
        if isinstance(v, str):
            return v
        return None


class SummaryPayload(BaseModel):
    """Strict four-field reply expected from the summary prompt."""
    model_config = ConfigDict(extra="forbid")

    summary: str = Field(..., min_length=1)
    urgentTasks: List[str]
    insights: List[str]
    recommendations: List[str]

    def to_summary(self) -> Summary:
        return Summary(
            summary=self.summary,
            urgent_tasks=self.urgentTasks,
            insights=self.insights,
            recommendations=self.recommendations,
        )
