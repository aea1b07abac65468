import logging
import time
from dataclasses import asdict
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.dependencies import get_current_user_id, get_settings, get_summarizer, get_task_extractor
from api.metrics import (
    EXTRACTIONS_TOTAL,
    REQUESTS_TOTAL,
    REQUEST_LATENCY_SECONDS,
    SUMMARIES_TOTAL,
)
from extraction.task_extractor import TaskExtractor
from llm.llm_client import call_with_deadline
from summary.summarizer import Summarizer, empty_summary
from temporal.resolver import align_to
from todo_ai.config import Settings
from todo_ai.models import ExtractionResult, Summary

router = APIRouter(prefix="/ai")
logger = logging.getLogger(__name__)


class ParseTodoIn(BaseModel):
    text: str = Field(..., alias="naturalLanguageInput")
    now: Optional[datetime] = None

    model_config = {"populate_by_name": True}


class SummarizeIn(BaseModel):
    period: Literal["day", "today", "week"]
    now: Optional[datetime] = None


def request_now(requested: Optional[datetime], settings: Settings) -> datetime:
    """
    The instant calendar words are resolved against.

    An aware caller value is kept in the caller's own offset; a naive one is
    wall-clock time in APP_TIMEZONE; a missing one is the server clock there.
    """
    server_now = settings.now()
    if requested is None:
        return server_now
    if requested.tzinfo is None:
        return align_to(requested, server_now)
    return requested


@router.post("/parse-todo", response_model=ExtractionResult)
async def parse_todo(
    payload: ParseTodoIn,
    extractor: TaskExtractor = Depends(get_task_extractor),
    settings: Settings = Depends(get_settings),
) -> ExtractionResult:
    start = time.time()
    now = request_now(payload.now, settings)
    logger.info(f"Received parse request: {payload.text[:50]}...")

    result = await call_with_deadline(
        extractor.extract, payload.text, now, deadline_s=settings.llm_timeout_s
    )

    REQUESTS_TOTAL.labels(endpoint="/ai/parse-todo", status="ok").inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/ai/parse-todo").observe(time.time() - start)
    EXTRACTIONS_TOTAL.inc()
    return result


@router.post("/summarize-todos", response_model=Summary)
async def summarize_todos(
    payload: SummarizeIn,
    user_id: str = Depends(get_current_user_id),
    summarizer: Summarizer = Depends(get_summarizer),
    settings: Settings = Depends(get_settings),
) -> Summary:
    start = time.time()
    now = request_now(payload.now, settings)

    summary = await summarizer.summarize(user_id, payload.period, now)

    period = "day" if payload.period == "today" else payload.period
    source = "empty" if summary == empty_summary(period) else "model"
    SUMMARIES_TOTAL.labels(period=period, source=source).inc()
    REQUESTS_TOTAL.labels(endpoint="/ai/summarize-todos", status="ok").inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/ai/summarize-todos").observe(time.time() - start)
    return summary


@router.get("/statistics")
async def get_statistics(
    period: Literal["day", "today", "week"] = "week",
    user_id: str = Depends(get_current_user_id),
    summarizer: Summarizer = Depends(get_summarizer),
    settings: Settings = Depends(get_settings),
) -> dict:
    """Raw period statistics, the same numbers the summary prompt is built from."""
    stats = await summarizer.statistics(user_id, period, settings.now())
    data = asdict(stats)
    data.pop("tasks")
    data["completion_rate_change"] = stats.completion_rate_change
    for group in ("by_priority", "by_category", "by_weekday", "by_time_slot"):
        for name, bucket in getattr(stats, group).items():
            data[group][name]["rate"] = bucket.rate
    return data
