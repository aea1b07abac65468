from __future__ import annotations

from datetime import date, datetime, time
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


Priority = Literal["high", "medium", "low"]
Category = Literal["work", "personal", "learning", "other"]
Period = Literal["day", "week"]

PRIORITIES: tuple = ("high", "medium", "low")
CATEGORIES: tuple = ("work", "personal", "learning", "other")

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


def _strip_title(v: str) -> str:
    v2 = v.strip()
    if not v2:
        raise ValueError("title must not be blank")
    return v2


class Task(BaseModel):
    id: str
    owner_id: str
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)

    priority: Priority = "medium"
    category: Category = "other"
    completed: bool = False

    due_at: Optional[datetime] = None
    # Stores always fill this; None only reaches the aggregator from malformed rows.
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _strip_title(v)


class TaskCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Priority = "medium"
    category: Category = "other"
    completed: bool = False
    due_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return _strip_title(v)


class TaskUpdate(BaseModel):
    """Partial patch; only fields that were explicitly set are applied."""

    title: Optional[str] = Field(None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: Optional[str] = Field(None, max_length=DESCRIPTION_MAX_LENGTH)
    priority: Optional[Priority] = None
    category: Optional[Category] = None
    completed: Optional[bool] = None
    due_at: Optional[datetime] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _strip_title(v)

    def changes(self) -> dict:
        """Explicitly set fields; None only clears the nullable ones."""
        return {
            k: v
            for k, v in self.model_dump(exclude_unset=True).items()
            if v is not None or k in ("description", "due_at")
        }


class ExtractionResult(BaseModel):
    title: str
    description: Optional[str] = None
    priority: Priority = "medium"
    category: Category = "other"
    due_date: Optional[str] = None  # YYYY-MM-DD
    due_time: Optional[str] = None  # HH:MM, 24h

    @property
    def due_at(self) -> Optional[datetime]:
        if not self.due_date:
            return None
        t = time.fromisoformat(self.due_time) if self.due_time else time(9, 0)
        return datetime.combine(date.fromisoformat(self.due_date), t)

    def to_task_create(self) -> TaskCreate:
        return TaskCreate(
            title=self.title,
            description=self.description,
            priority=self.priority,
            category=self.category,
            due_at=self.due_at,
        )


class Summary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    urgent_tasks: List[str] = Field(default_factory=list, alias="urgentTasks")
    insights: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
