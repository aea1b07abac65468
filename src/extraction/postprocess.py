"""
Repair the model's raw todo guess into a complete ExtractionResult.

Nothing in here raises: a defective field is replaced by a default or
dropped, never reported as an error. Running the repair on its own output
returns the same result.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Tuple

from llm.schemas import ParsedTodo
from temporal.resolver import normalize_clock_time, resolve_relative_date
from todo_ai.models import (
    CATEGORIES,
    DESCRIPTION_MAX_LENGTH,
    PRIORITIES,
    TITLE_MAX_LENGTH,
    ExtractionResult,
)

logger = logging.getLogger(__name__)

MIN_TITLE_LENGTH = 2
FALLBACK_TITLE_LENGTH = 20
DEFAULT_DUE_TIME = "09:00"
ELLIPSIS = "..."

PRIORITY_ALIASES = {
    "urgent": "high",
    "important": "high",
    "normal": "medium",
    "moderate": "medium",
}

CATEGORY_ALIASES = {
    "business": "work",
    "job": "work",
    "health": "personal",
    "social": "personal",
    "study": "learning",
    "education": "learning",
    "etc": "other",
    "misc": "other",
}


def _coerce(value: Optional[str], allowed: tuple, aliases: dict, default: str) -> str:
    v = (value or "").strip().lower()
    if v in allowed:
        return v
    return aliases.get(v, default)


def repair_title(title: Optional[str], original_input: str) -> str:
    t = (title or "").strip()
    if len(t) < MIN_TITLE_LENGTH:
        logger.warning(f"Model title {title!r} too short, using input prefix")
        t = original_input.strip()[:FALLBACK_TITLE_LENGTH].strip()
    if len(t) > TITLE_MAX_LENGTH:
        t = t[: TITLE_MAX_LENGTH - len(ELLIPSIS)] + ELLIPSIS
    return t


def _parse_due_date(value: str, now: datetime) -> Tuple[Optional[date], Optional[str]]:
    """Date plus, for ISO datetimes, the embedded HH:MM."""
    v = value.strip()
    try:
        return date.fromisoformat(v), None
    except ValueError:
        pass
    try:
        dt = datetime.fromisoformat(v)
        return dt.date(), dt.strftime("%H:%M")
    except ValueError:
        pass
    return resolve_relative_date(v, now), None


def repair_due(
    due_date: Optional[str],
    due_time: Optional[str],
    now: datetime,
) -> Tuple[Optional[str], Optional[str]]:
    if not due_date or not due_date.strip() or due_date.strip().lower() == "null":
        return None, None

    parsed, embedded_time = _parse_due_date(due_date, now)
    if parsed is None:
        logger.warning(f"Dropping unparseable due date from model: {due_date!r}")
        return None, None

    hhmm = normalize_clock_time(due_time) or embedded_time or DEFAULT_DUE_TIME

    today = now.date()
    if parsed < today:
        logger.warning(f"Past due date from model: {parsed.isoformat()} -> {today.isoformat()}")
        parsed = today

    return parsed.isoformat(), hhmm


def postprocess(raw: ParsedTodo, original_input: str, now: datetime) -> ExtractionResult:
    due_date, due_time = repair_due(raw.due_date, raw.due_time, now)

    description = (raw.description or "").strip() or original_input
    description = description[:DESCRIPTION_MAX_LENGTH]

    return ExtractionResult(
        title=repair_title(raw.title, original_input),
        description=description,
        priority=_coerce(raw.priority, PRIORITIES, PRIORITY_ALIASES, "medium"),
        category=_coerce(raw.category, CATEGORIES, CATEGORY_ALIASES, "other"),
        due_date=due_date,
        due_time=due_time,
    )
